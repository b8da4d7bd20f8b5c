"""
CLI entry point for babushka.
"""

# Standard library imports
import logging
import os
from pathlib import Path
from typing import NoReturn, Optional

# Third-party imports
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Local application imports
from babushka.cli._study_logic import open_trainer, study_logic
from babushka.config import Settings, load_settings
from babushka.constants import DEFAULT_CONTEXT_WORD, DEFAULT_UNIT_ID
from babushka.db import MemoryStorage
from babushka.deck_store import DeckStore
from babushka.exceptions import BabushkaError, CardFileError
from babushka.gateway import GeminiGateway
from babushka.library import find_topic, search_library
from babushka.parser import load_cards_file
from babushka.ports import WavFileSink
from babushka.trainer import Trainer


console = Console()

app = typer.Typer(
    name="babushka",
    help="Babushka: Russian vocabulary flashcards with a grandmother's touch.",
    add_completion=False,
    rich_markup_mode="markdown",
)


# ---------------------------------------------------------------------------
# Helpers for settings and the --db path
# ---------------------------------------------------------------------------


def _get_settings() -> Settings:
    return load_settings()


def _resolve_db_path(db: Optional[Path], settings: Settings) -> Path:
    """Resolve db path from CLI flag, BABUSHKA_DB envvar, or settings."""
    if db is not None:
        return db
    env_val = os.environ.get("BABUSHKA_DB")
    if env_val:
        return Path(env_val)
    return settings.db_path


# Common typer options reused across commands
_db_option = typer.Option(  # noqa: B008
    None,
    "--db",
    help="Path to the DuckDB storage file. "
    "Falls back to BABUSHKA_DB, then to ~/.babushka/babushka.db.",
    envvar="BABUSHKA_DB",
)

_icon_option = typer.Option(  # noqa: B008
    None,
    "--icon",
    help="Emoji shown next to the unit name.",
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show informational log messages."
    ),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str, exc: Optional[Exception] = None) -> NoReturn:
    console.print(f"[bold red]{escape(message)}[/bold red]")
    if exc is not None:
        raise typer.Exit(code=1) from exc
    raise typer.Exit(code=1)


def _print_notice(trainer: Trainer, style: str = "yellow") -> None:
    notice = trainer.pop_notice()
    if notice:
        console.print(f"[{style}]{escape(notice)}[/{style}]")


# ---------------------------------------------------------------------------
# Units & study
# ---------------------------------------------------------------------------


@app.command()
def units(db: Optional[Path] = _db_option):
    """List built-in and custom units."""
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    try:
        with open_trainer(db_path, settings) as trainer:
            table = Table(title="Units")
            table.add_column("ID", style="cyan")
            table.add_column("Label", style="magenta")
            table.add_column("Cards", style="yellow", justify="right")
            for unit_id, label in trainer.store.list_units():
                table.add_row(
                    unit_id,
                    escape(label),
                    str(len(trainer.store.get_cards(unit_id))),
                )
            console.print(table)
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


@app.command()
def study(
    unit_id: str = typer.Argument(  # noqa: B008
        DEFAULT_UNIT_ID, help="The id of the unit to study."
    ),
    db: Optional[Path] = _db_option,
    shuffle: bool = typer.Option(
        False, "--shuffle", "-s", help="Shuffle the cards before starting."
    ),
):
    """Study a unit interactively."""
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    try:
        study_logic(
            db_path=db_path, settings=settings, unit_id=unit_id, shuffle=shuffle
        )
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


# ---------------------------------------------------------------------------
# Creating units
# ---------------------------------------------------------------------------


@app.command()
def add(
    file: Path = typer.Argument(  # noqa: B008
        ..., help="YAML or JSON file with the cards of the new unit."
    ),
    name: Optional[str] = typer.Option(
        None, "--name", "-n", help="Unit name. Defaults to the file's 'name'."
    ),
    icon: Optional[str] = _icon_option,
    db: Optional[Path] = _db_option,
):
    """
    Create a unit from a card file.

    The file holds a list of cards, or a mapping with `cards` and optional
    `name` and `icon`. Each card has `f` (Russian), `t` (translation) and
    optionally `p` (phonetic) and `c` (context).
    """
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    try:
        card_file = load_cards_file(file)
    except CardFileError as e:
        _fail(f"Could not load cards: {e}", e)

    unit_name = name or card_file.name
    if not unit_name or not unit_name.strip():
        _fail("Error: --name is required when the file has no 'name'.")

    try:
        with open_trainer(db_path, settings) as trainer:
            unit_id = trainer.add_unit(
                unit_name, card_file.cards, icon=icon or card_file.icon
            )
            console.print(
                f"[bold green]Added {escape(trainer.current_label)}[/bold green] "
                f"([cyan]{unit_id}[/cyan], {len(card_file.cards)} cards)"
            )
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


@app.command()
def generate(
    topic: str = typer.Argument(..., help="Topic to write a unit about."),  # noqa: B008
    icon: Optional[str] = _icon_option,
    db: Optional[Path] = _db_option,
):
    """Ask Babushka's AI memory to write a new unit for a topic."""
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    if icon is None:
        category = find_topic(topic)
        icon = category.icon if category else None

    try:
        with open_trainer(db_path, settings) as trainer:
            with console.status("Babushka is writing..."):
                unit_id = trainer.generate_unit(topic, icon=icon)
            if unit_id is None:
                _print_notice(trainer, style="bold red")
                raise typer.Exit(code=1)
            console.print(
                f"[bold green]Added {escape(trainer.current_label)}[/bold green] "
                f"([cyan]{unit_id}[/cyan], {trainer.session.size} cards)"
            )
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


# ---------------------------------------------------------------------------
# Deleting & sharing
# ---------------------------------------------------------------------------


@app.command()
def delete(
    unit_id: str = typer.Argument(..., help="The id of the unit to delete."),  # noqa: B008
    db: Optional[Path] = _db_option,
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Bypass confirmation prompt."
    ),
):
    """Delete a custom unit."""
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    try:
        with open_trainer(db_path, settings) as trainer:
            if trainer.store.is_builtin(unit_id):
                _fail(f"Error: Built-in unit '{unit_id}' cannot be deleted.")
            unit = trainer.store.get_unit(unit_id)
            if unit is None:
                _fail(f"Error: Unit '{unit_id}' not found.")

            if not yes:
                confirmed = typer.confirm(
                    "Babushka says: Are you sure you want to forget "
                    f'everything about "{unit.name}"?'
                )
                if not confirmed:
                    console.print("Delete operation cancelled.")
                    raise typer.Exit()

            trainer.delete_unit(unit_id)
            console.print(
                f"[bold green]Deleted unit {escape(unit.name)}.[/bold green]"
            )
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


@app.command()
def share(
    unit_id: str = typer.Argument(..., help="The id of the unit to share."),  # noqa: B008
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Address of the trainer the link opens."
    ),
    db: Optional[Path] = _db_option,
):
    """Print a link that carries a custom unit to another device."""
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    try:
        with open_trainer(db_path, settings) as trainer:
            url = trainer.share_unit(unit_id, base_url=base_url)
            if url is None:
                _fail(f"Error: '{unit_id}' is not a custom unit.")
            _print_notice(trainer, style="green")
            console.print(url, soft_wrap=True, markup=False)
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


@app.command()
def receive(
    url: str = typer.Argument(..., help="A share link."),  # noqa: B008
    db: Optional[Path] = _db_option,
):
    """Import the unit carried by a share link."""
    settings = _get_settings()
    db_path = _resolve_db_path(db, settings)
    try:
        with open_trainer(db_path, settings) as trainer:
            before = trainer.session.active_unit_id
            trainer.receive_shared_link(url)
            if trainer.session.active_unit_id == before:
                _fail("No valid shared unit found in that link.")
            _print_notice(trainer, style="green")
            console.print(
                f"Imported [bold]{escape(trainer.current_label)}[/bold] "
                f"([cyan]{trainer.session.active_unit_id}[/cyan])"
            )
    except BabushkaError as e:
        _fail(f"A storage error occurred: {e}", e)


# ---------------------------------------------------------------------------
# Assistant & audio
# ---------------------------------------------------------------------------


@app.command()
def ask(
    question: str = typer.Argument(..., help="Your question for Babushka."),  # noqa: B008
    word: str = typer.Option(
        DEFAULT_CONTEXT_WORD, "--word", "-w", help="Word the question is about."
    ),
):
    """Ask Babushka about a Russian word."""
    settings = _get_settings()
    answer = GeminiGateway(settings).ask(question, word)
    console.print(f'[magenta]"{escape(answer)}"[/magenta]')


@app.command()
def say(
    text: str = typer.Argument(..., help="Russian text to pronounce."),  # noqa: B008
    out_dir: Optional[Path] = typer.Option(  # noqa: B008
        None,
        "--out-dir",
        help="Directory for the WAV file. Defaults to ~/.babushka/audio.",
        file_okay=False,
        dir_okay=True,
    ),
):
    """Pronounce Russian text and save it as a WAV file."""
    settings = _get_settings()
    sink = WavFileSink(out_dir or settings.audio_dir)
    trainer = Trainer(DeckStore(MemoryStorage()), settings, audio=sink)
    if not trainer.speak(text):
        _fail("Babushka lost her voice. Check GEMINI_API_KEY and try again.")
    console.print(f"Saved audio to [cyan]{sink.last_path}[/cyan]")


# ---------------------------------------------------------------------------
# Library
# ---------------------------------------------------------------------------


@app.command()
def library(
    search: Optional[str] = typer.Option(
        None, "--search", "-s", help="Filter categories and topics."
    ),
):
    """Browse the topic archive. Generate any topic with `generate`."""
    categories = search_library(search)
    if not categories:
        console.print(
            "[yellow]Nothing found in the archive, dearie. "
            "Try another word?[/yellow]"
        )
        return
    for cat in categories:
        table = Table(
            title=f"{cat.icon} {escape(cat.category)} ({len(cat.topics)} topics)",
            show_header=False,
        )
        table.add_column("Topic", style="cyan")
        for topic in cat.topics:
            table.add_row(escape(topic))
        console.print(table)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """
    Run the CLI application.

    If an unexpected exception occurs, print a bold red error message to the console and exit the process with status code 1.
    """
    try:
        app()
    except Exception as e:
        console.print(f"[bold red]UNEXPECTED ERROR: {escape(str(e))}[/bold red]")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
