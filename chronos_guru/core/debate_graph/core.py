"""DebateGraph module.

Sequences completion requests across the active figures for one user turn.

Graph Structure:
- ``route_entry`` sends single-figure turns to ``solo_reply`` and
  multi-figure turns to ``first_speaker``.
- ``first_speaker`` asks a randomly chosen figure to answer the user.
- ``next_speaker`` runs once per remaining figure, quoting every reply of
  the turn so far in a composite prompt.
- ``apologize`` ends a failed turn with one apology from the primary figure.

Requests are never concurrent: each node speaks its reply to completion
before returning, so speaker k has finished before speaker k+1 is asked.

Usage:
    dgraph = DebateGraph.compile()
    result = dgraph.invoke(make_state(msg, history, figures), context)
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional

from langchain_core.runnables import RunnableConfig
from langgraph.graph import END, START, StateGraph
from langgraph.graph.state import CompiledStateGraph
from langgraph.runtime import Runtime
from loguru import logger

from chronos_guru.core.completion import CompletionError
from chronos_guru.core.constants import APOLOGY_MSG
from chronos_guru.core.debate_graph.context import DebateContext
from chronos_guru.core.debate_graph.state import DebateState, display_state_snapshot
from chronos_guru.core.models import Message
from chronos_guru.core.persona import build_persona_prompt

COMPOSITE_TEMPLATE = (
    'Original question: "{question}"\n\n'
    "Other perspectives in this debate:\n{statements}\n\n"
    "Now respond to the question, and you may also address or reference what"
    " the others said."
)


def composite_prompt(question: str, responses: List[Message]) -> str:
    """Build the user turn for a later speaker, quoting prior replies verbatim."""
    statements = "\n\n".join(f'{r.speaker} said: "{r.content}"' for r in responses)
    return COMPOSITE_TEMPLATE.format(question=question, statements=statements)


def _fail(state: DebateState, node: str, ex: Exception) -> Dict[str, Any]:
    logger.error(f"Node '{node}' request failed: {ex}")
    return {
        "phase": "IDLE",
        "failed": True,
        "error": str(ex),
        "queue": [],
        "new_messages": [],
    }


def _reply(
    runtime: Runtime[DebateContext],
    figure: str,
    history: List[Message],
    all_figures: Optional[List[str]] = None,
    responding_to: Optional[str] = None,
) -> str:
    ctx = runtime.context
    system = build_persona_prompt(
        figure,
        ctx["language"],
        all_figures=all_figures,
        responding_to=responding_to,
    )
    return ctx["completion"].complete(history, system=system, profile="chat")


def _deliver(runtime: Runtime[DebateContext], message: Message) -> None:
    """Append to the transcript, then speak to completion."""
    runtime.context["publish"](message)
    runtime.context["speak"](message)


# ---------------------------------------------------------------------------
# Nodes
# ---------------------------------------------------------------------------


def solo_reply(state: DebateState, runtime: Runtime[DebateContext]) -> Dict[str, Any]:
    """Single-figure turn: one request, one speak call, no debate context."""
    figure = state["figures"][0]
    history = state["history"] + [Message(role="user", content=state["user_message"])]
    try:
        text = _reply(runtime, figure, history)
    except CompletionError as ex:
        return _fail(state, "solo_reply", ex)
    message = Message(role="assistant", content=text, speaker=figure)
    _deliver(runtime, message)
    return {"phase": "IDLE", "responses": [message], "new_messages": [message]}


def first_speaker(
    state: DebateState, runtime: Runtime[DebateContext]
) -> Dict[str, Any]:
    """Pick the first respondent and have them answer the plain user message."""
    figures = state["figures"]
    figure = runtime.context["choose"](figures)
    logger.debug(f"First speaker chosen: {figure}")
    queue = [f for f in figures if f != figure]
    history = state["history"] + [Message(role="user", content=state["user_message"])]
    try:
        text = _reply(runtime, figure, history, all_figures=figures)
    except CompletionError as ex:
        return _fail(state, "first_speaker", ex)

    message = Message(role="assistant", content=text, speaker=figure)
    _deliver(runtime, message)
    return {
        "phase": "AWAITING_NEXT_SPEAKER" if queue else "IDLE",
        "first_speaker": figure,
        "queue": queue,
        "responses": [message],
        "new_messages": [message],
    }


def next_speaker(state: DebateState, runtime: Runtime[DebateContext]) -> Dict[str, Any]:
    """Have the next queued figure answer with every prior reply in view."""
    figure, queue = state["queue"][0], state["queue"][1:]
    runtime.context["pause"](runtime.context["pacing_seconds"])

    responses = state["responses"]
    prompt = composite_prompt(state["user_message"], responses)
    history = state["history"] + [Message(role="user", content=prompt)]
    try:
        text = _reply(
            runtime,
            figure,
            history,
            all_figures=state["figures"],
            responding_to=responses[-1].speaker if responses else None,
        )
    except CompletionError as ex:
        return _fail(state, "next_speaker", ex)

    phase = "AWAITING_NEXT_SPEAKER" if queue else "IDLE"
    if not text or not text.strip():
        logger.warning(f"Empty response from {figure}; skipping")
        return {"phase": phase, "queue": queue, "new_messages": []}

    message = Message(role="assistant", content=text, speaker=figure)
    _deliver(runtime, message)
    return {
        "phase": phase,
        "queue": queue,
        "responses": responses + [message],
        "new_messages": [message],
    }


def apologize(state: DebateState, runtime: Runtime[DebateContext]) -> Dict[str, Any]:
    """Close a failed turn with one apology tagged to the primary figure."""
    message = Message(
        role="assistant",
        content=APOLOGY_MSG,
        speaker=runtime.context["primary_figure"],
    )
    runtime.context["publish"](message)
    return {
        "phase": "IDLE",
        "responses": state["responses"] + [message],
        "new_messages": [message],
    }


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------


def route_entry(state: DebateState) -> str:
    """Single figure bypasses the debate loop."""
    return "first_speaker" if len(state["figures"]) > 1 else "solo_reply"


def route_after_reply(state: DebateState) -> str:
    """Continue with the queue, apologize on failure, or finish."""
    if state["failed"]:
        return "apologize"
    if state["queue"]:
        return "next_speaker"
    return "__END__"


class DebateGraph:
    """Wrapper that holds the compiled LangGraph graph."""

    def __init__(self, cgraph: CompiledStateGraph) -> None:
        """Create a DebateGraph around an already compiled graph."""
        self.cgraph = cgraph

    @classmethod
    def compile(cls) -> "DebateGraph":
        """Build and compile the turn graph."""
        logger.debug("Compiling debate graph...")
        builder = StateGraph(state_schema=DebateState, context_schema=DebateContext)
        builder.add_node("solo_reply", solo_reply)
        builder.add_node("first_speaker", first_speaker)
        builder.add_node("next_speaker", next_speaker)
        builder.add_node("apologize", apologize)

        builder.add_conditional_edges(
            START,
            route_entry,
            {"solo_reply": "solo_reply", "first_speaker": "first_speaker"},
        )
        after = {"apologize": "apologize", "next_speaker": "next_speaker", "__END__": END}
        builder.add_conditional_edges("solo_reply", route_after_reply, after)
        builder.add_conditional_edges("first_speaker", route_after_reply, after)
        builder.add_conditional_edges("next_speaker", route_after_reply, after)
        builder.add_edge("apologize", END)
        return cls(cgraph=builder.compile())

    @staticmethod
    def _config(state: DebateState) -> RunnableConfig:
        # one step per speaker plus entry, apology and slack
        return {"recursion_limit": len(state["figures"]) + 5}

    def _entered(self, state: DebateState) -> DebateState:
        entered = dict(state)
        entered["phase"] = (
            "AWAITING_FIRST_SPEAKER" if len(state["figures"]) > 1 else "IDLE"
        )
        return entered  # type: ignore[return-value]

    def invoke(self, state: DebateState, context: DebateContext) -> DebateState:
        """Run one turn to completion and return the final state."""
        result = self.cgraph.invoke(
            self._entered(state), context=context, config=self._config(state)
        )
        display_state_snapshot(result)
        return result  # type: ignore[return-value]

    def stream(
        self, state: DebateState, context: DebateContext
    ) -> Iterator[List[Message]]:
        """Run one turn, yielding the messages each node produced."""
        for update in self.cgraph.stream(
            self._entered(state),
            context=context,
            config=self._config(state),
            stream_mode="updates",
        ):
            if not isinstance(update, dict):
                logger.error(f"Unexpected update type from cgraph.stream: {update}")
                continue
            for node_name, node_update in update.items():
                logger.debug(f"Debate node '{node_name}' finished")
                new = (node_update or {}).get("new_messages") or []
                if new:
                    yield list(new)
