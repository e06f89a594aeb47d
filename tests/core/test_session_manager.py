"""Tests for the chat session manager."""

from pathlib import Path
from typing import Callable

import pytest

from chronos_guru.core.constants import APOLOGY_MSG, SYSTEM_SPEAKER
from chronos_guru.core.progress import FileProgressBackend, ProgressStore
from chronos_guru.core.quiz import QuizGenerationError, QuizStateError
from chronos_guru.core.recognition import RecognitionResult
from chronos_guru.core.session_manager import ChatSession, SessionBusyError
from tests.fakes import FakeCompletion, RecordingPlayer, failing, quiz_reply

MakeSession = Callable[..., ChatSession]


@pytest.mark.unit
def test_create_greets_without_speaking(
    make_session: MakeSession, player: RecordingPlayer
) -> None:
    """A new session holds exactly the figure's greeting."""
    session = make_session("Cleopatra")

    assert session.figures == ["Cleopatra"]
    (greeting,) = session.messages
    assert greeting.role == "assistant"
    assert greeting.speaker == "Cleopatra"
    assert greeting.content.startswith("Greetings! I am Cleopatra.")
    assert player.played == []


@pytest.mark.unit
@pytest.mark.parametrize("figure, language", [("", "en"), ("   ", "en"), ("Plato", "xx")])
def test_create_rejects_bad_input(make_session: MakeSession, figure: str, language: str) -> None:
    """Blank figures and unknown languages are rejected."""
    with pytest.raises(ValueError):
        make_session(figure, language=language)


@pytest.mark.unit
def test_send_single_figure(
    make_session: MakeSession, completion: FakeCompletion, player: RecordingPlayer
) -> None:
    """A message gets one reply, which is appended and spoken."""
    completion.script("chat", "E equals mc squared.")
    completion.script("gender", '{"gender": "male"}')
    session = make_session()

    replies = session.send("  What is energy?  ")

    assert [m.content for m in replies] == ["E equals mc squared."]
    assert [m.role for m in session.messages] == ["assistant", "user", "assistant"]
    assert session.messages[1].content == "What is energy?"
    assert [c.text for c in player.played] == ["E equals mc squared."]
    assert player.played[0].speaker == "Albert Einstein"
    assert session.loading is False
    # the request history excludes the new message; it is the final turn
    (call,) = completion.calls_for("chat")
    assert call.last_content == "What is energy?"
    assert len(call.history) == 2


@pytest.mark.unit
def test_send_failure_apologizes(
    make_session: MakeSession, completion: FakeCompletion, player: RecordingPlayer
) -> None:
    """A failed reply yields the apology and clears loading."""
    completion.script("chat", failing())
    session = make_session()

    replies = session.send("Hello?")

    assert [m.content for m in replies] == [APOLOGY_MSG]
    assert session.messages[-1].content == APOLOGY_MSG
    assert session.loading is False
    assert player.played == []


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "   ", None])
def test_send_rejects_blank(make_session: MakeSession, text) -> None:
    """Blank messages never reach the service."""
    session = make_session()
    with pytest.raises(ValueError):
        session.send(text)
    assert len(session.messages) == 1


@pytest.mark.unit
def test_send_while_loading_is_refused(make_session: MakeSession) -> None:
    """A second message during a running turn is refused."""
    session = make_session()
    session.loading = True
    with pytest.raises(SessionBusyError):
        session.send("Are you there?")


@pytest.mark.unit
def test_stream_send_marks_loading_during_turn(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """loading is set while replies stream and cleared at the end."""
    session = make_session()
    session.add_figure("Isaac Newton")
    completion.script("chat", "first", "second")

    stream = session.stream_send("Gravity?")
    first = next(stream)
    assert session.loading is True
    assert [m.speaker for m in first] == ["Albert Einstein"]

    rest = list(stream)
    assert [m.speaker for batch in rest for m in batch] == ["Isaac Newton"]
    assert session.loading is False


@pytest.mark.unit
def test_add_figure_introduces_and_dedupes(make_session: MakeSession) -> None:
    """A new figure adds an introduction and a debate notice; repeats are ignored."""
    session = make_session("Albert Einstein")

    added = session.add_figure("Isaac Newton")

    assert session.figures == ["Albert Einstein", "Isaac Newton"]
    assert [m.speaker for m in added] == ["Isaac Newton", SYSTEM_SPEAKER]
    assert "Albert Einstein, it is an honor" in added[0].content
    assert "Cross-Era Debate Mode Activated!" in added[1].content
    assert session.messages[-2:] == added

    assert session.add_figure("isaac newton") == []
    assert session.figures == ["Albert Einstein", "Isaac Newton"]
    with pytest.raises(ValueError):
        session.add_figure("  ")


@pytest.mark.unit
def test_debate_turn_speaks_each_figure_in_their_voice(
    make_session: MakeSession, completion: FakeCompletion, player: RecordingPlayer
) -> None:
    """Every debater's reply is spoken with their own detected gender."""
    session = make_session("Albert Einstein")
    session.add_figure("Marie Curie")
    completion.script("chat", "Relativity.", "Radioactivity.")
    completion.script("gender", '{"gender":"male"}', '{"gender":"female"}')

    session.send("What was your greatest discovery?")

    assert [c.speaker for c in player.played] == ["Albert Einstein", "Marie Curie"]
    assert session.genders == {"Albert Einstein": "male", "Marie Curie": "female"}
    second = completion.calls_for("chat")[1]
    assert 'Albert Einstein said: "Relativity."' in second.last_content


@pytest.mark.unit
def test_suggestions_skip_present_figures(make_session: MakeSession) -> None:
    """The picker never offers someone already in the conversation."""
    session = make_session("Socrates")
    suggestions = session.suggestions()
    assert "Socrates" not in suggestions
    assert 0 < len(suggestions) <= 6


@pytest.mark.unit
def test_set_language_validates(make_session: MakeSession) -> None:
    """Only known codes and auto are accepted."""
    session = make_session()
    session.set_language("auto")
    assert session.language == "auto"
    with pytest.raises(ValueError):
        session.set_language("elvish")
    assert session.language == "auto"


@pytest.mark.unit
def test_read_aloud_and_stop(make_session: MakeSession, player: RecordingPlayer) -> None:
    """Reading a message speaks it as its speaker; stop reaches the player."""
    session = make_session("Plato")
    cue = session.read_aloud(0)
    assert cue.speaker == "Plato"
    assert cue.text.startswith("Greetings!")

    session.stop_audio()
    assert player.stops == 1


@pytest.mark.unit
def test_negative_indices_are_rejected(
    make_session: MakeSession, player: RecordingPlayer
) -> None:
    """Messages are addressed by transcript position only."""
    session = make_session("Plato", language="fr")
    with pytest.raises(IndexError):
        session.read_aloud(-1)
    with pytest.raises(IndexError):
        session.translate_message(-1)
    assert player.played == []


@pytest.mark.unit
def test_translate_message(make_session: MakeSession, completion: FakeCompletion) -> None:
    """Assistant messages get an English translation; failures give None."""
    session = make_session("Napoleon", language="fr")
    completion.script("translate", "Hello, I am Napoleon.", failing())

    assert session.translate_message(0) == "Hello, I am Napoleon."
    assert session.messages[0].english_translation == "Hello, I am Napoleon."

    session.messages[0].english_translation = None
    assert session.translate_message(0) is None
    assert session.messages[0].english_translation is None


@pytest.mark.unit
def test_translate_english_session_needs_no_request(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """English replies are their own translation and nothing is stored."""
    session = make_session()
    assert session.translate_message(0) == session.messages[0].content
    assert session.messages[0].english_translation is None
    assert completion.calls_for("translate") == []


@pytest.mark.unit
def test_translate_user_message_is_refused(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """Only figure replies can be translated."""
    session = make_session()
    completion.script("chat", "Hi!")
    session.send("Hello")
    with pytest.raises(ValueError):
        session.translate_message(1)


@pytest.mark.unit
def test_dictation_feeds_buffer(make_session: MakeSession) -> None:
    """Recognition events accumulate into the dictation text."""
    session = make_session()
    session.dictate([RecognitionResult(transcript="Tell me ", is_final=True)])
    text = session.dictate(
        [
            RecognitionResult(transcript="Tell me ", is_final=True),
            RecognitionResult(transcript="about Mars", is_final=True),
        ],
        1,
    )
    assert text == "Tell me about Mars"


@pytest.mark.unit
def test_quiz_round_updates_progress(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """A full quiz posts a reflection and records points and badges."""
    session = make_session("Marie Curie")
    completion.script("quiz", quiz_reply(5, correct=1))
    completion.script("reflection", "Oh! Well done, my friend.")

    questions = session.start_quiz()
    assert len(questions) == 5
    for i in range(5):
        session.answer_quiz(i, 1 if i < 3 else 0)

    result, reflection, progress = session.finish_quiz()

    assert result.score == 3
    assert len(result.wrong) == 2
    assert reflection.content == "Oh! Well done, my friend."
    assert reflection.speaker == "Marie Curie"
    assert session.messages[-1] == reflection
    assert progress.points == 30
    assert {b.id for b in progress.badges} == {"learner", "historian"}
    assert progress.figures["Marie Curie"].quizzes == 1
    assert session.progress.load().points == 30
    assert session.last_result == result


@pytest.mark.unit
def test_reflection_failure_uses_fallback(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """Without the service, a static reflection is posted."""
    session = make_session("Marie Curie")
    completion.script("quiz", quiz_reply(5, correct=0))
    completion.script("reflection", failing())

    session.start_quiz()
    for i in range(5):
        session.answer_quiz(i, 0)
    result, reflection, progress = session.finish_quiz()

    assert result.score == 5
    assert reflection.content.startswith("You scored 5/5.")
    assert "Brilliant!" in reflection.content
    assert progress.points == 60


@pytest.mark.unit
def test_quiz_generation_failure_leaves_quiz_unstarted(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """A failed generation raises and nothing starts."""
    session = make_session()
    completion.script("quiz", "nope")
    with pytest.raises(QuizGenerationError):
        session.start_quiz()
    assert session.quiz.status == "NOT_STARTED"
    with pytest.raises(QuizStateError):
        session.finish_quiz()


@pytest.mark.unit
def test_restarting_a_quiz_discards_the_previous_attempt(
    make_session: MakeSession, completion: FakeCompletion
) -> None:
    """Starting again resets the attempt first."""
    session = make_session()
    completion.script("quiz", quiz_reply(), quiz_reply(correct=3))
    session.start_quiz()
    session.answer_quiz(0, 2)

    session.start_quiz()
    assert session.quiz.answers == [None] * 5
    assert session.quiz.questions[0].correct_answer == 3

    session.reset_quiz()
    assert session.quiz.status == "NOT_STARTED"


@pytest.mark.unit
def test_export_summary(
    make_session: MakeSession, completion: FakeCompletion, tmp_path: Path
) -> None:
    """The summary renders to HTML and is saved on request."""
    session = make_session("Isaac Newton")
    completion.script(
        "summary",
        '{"points": ["Laws of motion"], "timeline": [{"date": "1687", "event": "Principia"}]}',
    )

    html, path = session.export_summary(save=True, out_dir=tmp_path)

    assert "<li>Laws of motion</li>" in html
    assert path is not None and path.parent == tmp_path
    assert path.read_text(encoding="utf-8") == html


@pytest.mark.unit
def test_session_dump_excludes_collaborators(make_session: MakeSession) -> None:
    """Only conversation data is serialized."""
    data = make_session("Plato").model_dump()
    assert set(data) >= {"figure", "figures", "language", "messages", "loading"}
    assert "completion" not in data and "speech" not in data


@pytest.mark.unit
def test_finish_quiz_survives_progress_write_failure(
    make_session: MakeSession, completion: FakeCompletion, tmp_path: Path
) -> None:
    """A storage failure still returns the result and the updated record."""

    class FullDisk(FileProgressBackend):
        def write(self, text: str) -> None:
            raise OSError("disk full")

    store = ProgressStore(FullDisk(tmp_path / "progress.json"))
    session = make_session("Marie Curie", progress=store)
    completion.script("quiz", quiz_reply(5, correct=1))
    completion.script("reflection", "Splendid.")
    session.start_quiz()
    for i in range(5):
        session.answer_quiz(i, 1)

    result, reflection, progress = session.finish_quiz()

    assert result.score == 5
    assert session.messages[-1] == reflection
    assert progress.points == 60
    assert store.load().points == 60
