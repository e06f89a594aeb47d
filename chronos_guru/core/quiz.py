"""Quiz engine: generation, scoring, badges and the attempt lifecycle."""

from __future__ import annotations

from typing import List, Literal, Optional, Sequence

from loguru import logger
from pydantic import BaseModel

from chronos_guru.core.completion import CompletionClient, CompletionError, HistoryItem
from chronos_guru.core.constants import (
    BADGE_DEFINITIONS,
    HISTORIAN_THRESHOLD,
    OPTIONS_PER_QUESTION,
    QUIZ_LENGTH,
)
from chronos_guru.core.decoding import decode_model
from chronos_guru.core.inference import transcript_text
from chronos_guru.core.models import Badge, QuizQuestion, QuizResult, WrongAnswer

QUIZ_PROMPT = """You are creating a quiz based on a conversation with {figure}.

Conversation:
{conversation}

Create exactly {n} multiple-choice quiz questions based on the facts discussed in this conversation about {figure}.
Each question should have {k} options, with one correct answer.

Return ONLY valid JSON in this exact format, no markdown or extra text:
{{
  "questions": [
    {{
      "question": "What is...",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correctAnswer": 0,
      "explanation": "The correct answer is..."
    }}
  ]
}}"""

QuizStatus = Literal["NOT_STARTED", "IN_PROGRESS", "COMPLETED"]


class QuizGenerationError(RuntimeError):
    """The quiz could not be generated."""


class QuizStateError(RuntimeError):
    """An operation was attempted in the wrong attempt state."""


class _QuizPayload(BaseModel):
    questions: List[QuizQuestion]


def generate_quiz(
    client: CompletionClient, figure: str, messages: Sequence[HistoryItem]
) -> List[QuizQuestion]:
    """Generate the questions for one attempt from the conversation.

    Raises:
        QuizGenerationError: On missing input, request failure or a reply
            that does not decode into enough well-formed questions.
    """
    if not figure or not messages:
        raise QuizGenerationError("A figure and a non-empty conversation are required")

    prompt = QUIZ_PROMPT.format(
        figure=figure,
        conversation=transcript_text(messages),
        n=QUIZ_LENGTH,
        k=OPTIONS_PER_QUESTION,
    )
    try:
        reply = client.ask(prompt, profile="quiz")
    except CompletionError as e:
        raise QuizGenerationError(f"Quiz request failed: {e}") from e

    decoded = decode_model(reply, _QuizPayload)
    if not decoded.ok:
        raise QuizGenerationError(f"Quiz reply unusable: {decoded.error}")
    questions: List[QuizQuestion] = decoded.value.questions
    if len(questions) < QUIZ_LENGTH:
        raise QuizGenerationError(
            f"Expected {QUIZ_LENGTH} questions, got {len(questions)}"
        )
    if len(questions) > QUIZ_LENGTH:
        logger.warning(f"Quiz reply had {len(questions)} questions; keeping {QUIZ_LENGTH}")
    return questions[:QUIZ_LENGTH]


def compute_badges(score: int, total: int) -> List[Badge]:
    """Badges earned by a score: learner always, historian at 3+, master if perfect."""
    earned = ["learner"]
    if score >= HISTORIAN_THRESHOLD:
        earned.append("historian")
    if score == total:
        earned.append("master")
    badges = []
    for badge_id in earned:
        name, description, icon = BADGE_DEFINITIONS[badge_id]
        badges.append(Badge(id=badge_id, name=name, description=description, icon=icon))
    return badges


def score_quiz(
    questions: Sequence[QuizQuestion], answers: Sequence[Optional[int]]
) -> QuizResult:
    """Score recorded selections against the correct options.

    An unanswered question counts as wrong and reports option 0 as the
    user's answer.
    """
    score = 0
    wrong: List[WrongAnswer] = []
    for i, q in enumerate(questions):
        selected = answers[i] if i < len(answers) else None
        if selected == q.correct_answer:
            score += 1
            continue
        wrong.append(
            WrongAnswer(
                index=i,
                question=q.question,
                user_answer=q.options[selected if selected is not None else 0],
                correct_answer=q.options[q.correct_answer],
                explanation=q.explanation,
            )
        )
    total = len(questions)
    return QuizResult(
        score=score, total=total, wrong=wrong, badges=compute_badges(score, total)
    )


class QuizAttempt:
    """One quiz attempt: NOT_STARTED -> IN_PROGRESS -> COMPLETED.

    Questions are fixed when the attempt starts; answers freeze when it
    completes. ``reset`` returns to NOT_STARTED from any state.
    """

    def __init__(self) -> None:
        """Initialize an empty attempt."""
        self.reset()

    def reset(self) -> None:
        """Discard questions, answers and result."""
        self.status: QuizStatus = "NOT_STARTED"
        self.questions: List[QuizQuestion] = []
        self.answers: List[Optional[int]] = []
        self.result: Optional[QuizResult] = None

    def start(self, questions: Sequence[QuizQuestion]) -> None:
        """Begin the attempt with generated questions."""
        if self.status != "NOT_STARTED":
            raise QuizStateError(f"Cannot start a quiz that is {self.status}")
        if not questions:
            raise QuizStateError("Cannot start a quiz without questions")
        self.questions = list(questions)
        self.answers = [None] * len(self.questions)
        self.status = "IN_PROGRESS"

    def answer(self, index: int, option: int) -> None:
        """Record the selected option for question ``index``."""
        if self.status != "IN_PROGRESS":
            raise QuizStateError(f"Cannot answer a quiz that is {self.status}")
        if not 0 <= index < len(self.questions):
            raise IndexError(f"No question at index {index}")
        if not 0 <= option < len(self.questions[index].options):
            raise IndexError(f"No option {option} for question {index}")
        self.answers[index] = option

    def finish(self) -> QuizResult:
        """Score the attempt and freeze it."""
        if self.status != "IN_PROGRESS":
            raise QuizStateError(f"Cannot finish a quiz that is {self.status}")
        self.result = score_quiz(self.questions, self.answers)
        self.status = "COMPLETED"
        logger.debug(f"Quiz completed with score {self.result.score}/{self.result.total}")
        return self.result
