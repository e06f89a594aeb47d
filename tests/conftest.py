"""The main entry point for pytest fixtures.

This will run before any tests are executed when `import pytest` is called.
"""

from __future__ import annotations

import logging
import textwrap
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator

import mongomock
import pytest
from loguru import logger

import chronos_guru.helpers.database_helpers as dbh
from chronos_guru.core.progress import FileProgressBackend, ProgressStore
from chronos_guru.core.session_manager import ChatSession
from chronos_guru.core.speech import SpeechController
from tests.fakes import FakeCompletion, QuietRandom, RecordingPlayer

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:^7} | {file.name}:{line} | {message}"


def _setup_logging() -> None:
    """Add a file sink to the default pytest console logging."""
    # logs/pytest_YYYYMMDD.log
    logs_dir = Path(__file__).resolve().parent.parent / "logs"
    logs_dir.mkdir(exist_ok=True)
    logfile = logs_dir / f"pytest_{datetime.now():%Y%m%d}.log"

    logger.add(
        logfile,
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="00:00",
        retention="7 days",
        compression="zip",
    )

    # Intercept stdlib logging so everything funnels through Loguru
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = logging.getLevelName(record.levelno)
            logger.opt(depth=6, exception=record.exc_info, colors=False).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def pytest_configure(config: pytest.Config) -> None:
    """Pytest configuration hook to add a file sink to default pytest logging."""
    _setup_logging()


def _write_yaml(path: Path, body: str) -> None:
    path.write_text(textwrap.dedent(body).strip() + "\n", encoding="utf-8")


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, str], Path]:
    """Create a YAML file inside tmp_path and gives you a path to it.

    Returns:
      a function you can call with (filename, body)
    """

    def _write(filename: str, body: str) -> Path:
        file_path = tmp_path / filename
        _write_yaml(file_path, body)
        return file_path

    return _write


@pytest.fixture(autouse=True)
def _isolate_db_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Automatically isolate DB state for each test.

    - Forces the helpers module to use `mongomock.MongoClient` instead of a real MongoDB.
    - Creates a unique database name per test by setting MONGO_URI.
    - Clears the helpers' module-level singletons before and after each test.
    """
    dbname = f"testdb_{uuid.uuid4().hex}"

    monkeypatch.setenv("MONGO_URI", f"mongodb://localhost:27017/{dbname}")
    monkeypatch.setattr(dbh, "MongoClient", mongomock.MongoClient, raising=True)

    dbh._client = None
    dbh._db = None

    try:
        yield
    finally:
        dbh._client = None
        dbh._db = None


@pytest.fixture(autouse=True)
def _no_hosted_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests off the hosted services even if a developer .env is loaded."""
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    monkeypatch.delenv("MURF_API_KEY", raising=False)


@pytest.fixture
def completion() -> FakeCompletion:
    """Scripted completion client that records every request."""
    return FakeCompletion()


@pytest.fixture
def player() -> RecordingPlayer:
    """Speech player that records cues in playback order."""
    return RecordingPlayer()


@pytest.fixture
def progress_store(tmp_path: Path) -> ProgressStore:
    """Progress store on a throwaway JSON file."""
    return ProgressStore(FileProgressBackend(tmp_path / "progress.json"))


@pytest.fixture
def make_session(
    completion: FakeCompletion, player: RecordingPlayer, progress_store: ProgressStore
) -> Callable[..., ChatSession]:
    """Build a ChatSession wired to the fakes, with no pacing delay.

    The first speaker is always the first listed figure unless ``choose``
    is passed.
    """

    def _make(figure: str = "Albert Einstein", **kwargs) -> ChatSession:
        speech = SpeechController(player, voice_client=None, rng=QuietRandom())
        kwargs.setdefault("choose", lambda figures: figures[0])
        kwargs.setdefault("pause", lambda _s: None)
        kwargs.setdefault("progress", progress_store)
        return ChatSession.create(
            figure=figure,
            completion=completion,
            speech=speech,
            **kwargs,
        )

    return _make
