"""
Command-line interface for studying a unit card by card.
"""

import logging

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from babushka.constants import MSG_EMPTY_UNIT
from babushka.models import FlashCard
from babushka.trainer import Trainer

logger = logging.getLogger(__name__)
console = Console()

PROMPT = (
    "[dim]\\[Enter] flip · \\[n]ext · \\[p]rev · \\[s]huffle · "
    "\\[a]sk · \\[v]oice · \\[q]uit[/dim] "
)


def _display_card(card: FlashCard, label: str, flipped: bool) -> None:
    """Render the front, or the translation with phonetics and context."""
    if not flipped:
        console.print(
            Panel(
                f"[bold]{escape(card.front)}[/bold]",
                title=escape(label),
                subtitle="TAP TO REVEAL",
                border_style="white",
            )
        )
        return
    body = f"[bold]{escape(card.translation)}[/bold]"
    if card.phonetic:
        body += f"\n[italic]\\[{escape(card.phonetic)}][/italic]"
    if card.context:
        body += f"\n\n{escape(card.context)}"
    console.print(
        Panel(
            body,
            title=escape(card.front),
            subtitle="TAP TO FLIP BACK",
            border_style="red",
        )
    )


def _show_notice(trainer: Trainer) -> None:
    notice = trainer.pop_notice()
    if notice:
        console.print(f"[bold yellow]{notice}[/bold yellow]")


def _ask_babushka(trainer: Trainer) -> None:
    question = console.input("[bold]Ask Babushka: [/bold]")
    answer = trainer.ask(question)
    if answer is None:
        return
    console.print(
        Panel(f'"{escape(answer)}"', title="Babushka", border_style="magenta")
    )


def start_study_flow(trainer: Trainer) -> None:
    """
    Run the interactive study loop until the user quits.

    Args:
        trainer: A Trainer with the unit to study already selected.
    """
    console.print(
        f"[bold cyan]Studying {escape(trainer.current_label)}[/bold cyan]"
    )
    if trainer.current_card is None:
        console.print(f"[italic]{MSG_EMPTY_UNIT}[/italic]")
        return

    while True:
        session = trainer.session
        console.rule(f"[bold]{session.position_label}[/bold]")
        _display_card(session.current_card, trainer.current_label, session.flipped)

        command = console.input(PROMPT).strip().lower()
        if command in ("", "f"):
            trainer.toggle_flip()
        elif command == "n":
            trainer.next_card()
        elif command == "p":
            trainer.previous_card()
        elif command == "s":
            trainer.shuffle()
            console.print("[green]Deck shuffled.[/green]")
        elif command == "a":
            _ask_babushka(trainer)
        elif command == "v":
            if trainer.speak_current():
                console.print("[green]Babushka said it aloud.[/green]")
            else:
                console.print("[yellow]Babushka lost her voice.[/yellow]")
        elif command == "q":
            break
        else:
            console.print(
                f"[bold red]Unknown command '{command}'.[/bold red]"
            )
        _show_notice(trainer)

    console.print("[bold cyan]Study session finished. Molodets![/bold cyan]")
