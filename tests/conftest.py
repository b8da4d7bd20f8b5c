import itertools
import random
import sys
from pathlib import Path
from typing import List
from unittest.mock import MagicMock

import pytest

from babushka.config import Settings
from babushka.db import MemoryStorage
from babushka.deck_store import DeckStore
from babushka.gateway import GeminiGateway
from babushka.models import FlashCard
from babushka.ports import MemoryClipboard
from babushka.trainer import Trainer


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Temporarily change the working directory to the test's tmpdir so no
    stray .env file or database leaks between tests.
    """
    tmpdir = request.getfixturevalue("tmpdir")
    sys.path.insert(0, str(tmpdir))
    with tmpdir.as_cwd():
        yield


@pytest.fixture(autouse=True)
def no_api_key_in_env(monkeypatch):
    """Keep a developer's real Gemini key out of the tests."""
    for var in ("GEMINI_API_KEY", "API_KEY", "BABUSHKA_GEMINI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def sample_cards() -> List[FlashCard]:
    """
    Three cards covering Cyrillic text, an empty phonetic field and
    punctuation in the context.
    """
    return [
        FlashCard(f="Привет", t="Hi", p="pree-VYET", c="Привет, как дела?"),
        FlashCard(f="Спасибо", t="Thank you", p="spa-SEE-ba", c="Большое спасибо!"),
        FlashCard(f="Да", t="Yes", p="", c='He said "да".'),
    ]


@pytest.fixture
def many_cards() -> List[FlashCard]:
    return [
        FlashCard(f=f"слово {i}", t=f"word {i}", p=f"SLO-va {i}", c="")
        for i in range(12)
    ]


@pytest.fixture
def clock():
    """Millisecond clock that ticks once per call."""
    return itertools.count(1_700_000_000_000).__next__


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(memory_storage: MemoryStorage, clock) -> DeckStore:
    """A deck store over in-memory storage and the bundled starter units."""
    return DeckStore(memory_storage, clock=clock)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with a fake key, no navigation pause and temp paths."""
    return Settings(
        gemini_api_key="test-key",
        nav_delay_ms=0,
        db_path=tmp_path / "babushka.db",
        audio_dir=tmp_path / "audio",
        share_base_url="https://example.test/app",
    )


@pytest.fixture
def mock_gateway() -> MagicMock:
    return MagicMock(spec=GeminiGateway)


@pytest.fixture
def clipboard() -> MemoryClipboard:
    return MemoryClipboard()


@pytest.fixture
def mock_audio() -> MagicMock:
    audio = MagicMock()
    audio.play.return_value = None
    return audio


@pytest.fixture
def trainer(
    store: DeckStore,
    settings: Settings,
    mock_gateway: MagicMock,
    clipboard: MemoryClipboard,
    mock_audio: MagicMock,
) -> Trainer:
    return Trainer(
        store,
        settings,
        gateway=mock_gateway,
        clipboard=clipboard,
        audio=mock_audio,
        rng=random.Random(1234),
        sleep=MagicMock(),
    )
