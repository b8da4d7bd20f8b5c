from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from babushka.cli.study_ui import start_study_flow
from babushka.config import Settings
from babushka.db import DuckDBStorage
from babushka.deck_store import DeckStore
from babushka.ports import AudioPort, MixerPlayer
from babushka.trainer import Trainer


@contextmanager
def open_trainer(
    db_path: Path,
    settings: Settings,
    audio: Optional[AudioPort] = None,
) -> Iterator[Trainer]:
    """
    Open the storage database and yield a Trainer over it.

    Without an ``audio`` port, spoken cards are written to WAV files in
    ``settings.audio_dir``.

    The connection is closed when the block exits.
    """
    with DuckDBStorage(db_path) as storage:
        store = DeckStore(storage)
        yield Trainer(store, settings, audio=audio)


def study_logic(
    db_path: Path,
    settings: Settings,
    unit_id: str,
    shuffle: bool = False,
) -> None:
    """
    Select a unit and launch the interactive study flow.

    Parameters:
        db_path (Path): Path to the storage database file.
        settings (Settings): Application settings.
        unit_id (str): Unit to study.
        shuffle (bool): Shuffle the working cards before starting.
    """
    with open_trainer(db_path, settings, audio=MixerPlayer()) as trainer:
        trainer.select_unit(unit_id)
        if shuffle:
            trainer.shuffle()
        start_study_flow(trainer)
