"""Command-line interface for the tarot divination engine."""

import argparse
import logging
import random
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from tarot_divination import __version__
from tarot_divination.catalog import ResourceCatalog
from tarot_divination.config import settings
from tarot_divination.deck import init_deck
from tarot_divination.divination import Divination
from tarot_divination.exceptions import DivinationError
from tarot_divination.models import PresentationUnit

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose or settings.debug else settings.log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


class ConsoleSink:
    """Print readings to the terminal, optionally saving card images."""

    def __init__(self, console: Console, save_dir: Optional[Path] = None) -> None:
        self.console = console
        self.save_dir = save_dir
        self.saved: list[Path] = []

    def announce(self, text: str) -> None:
        self.console.print(f"[bold magenta]{escape(text)}[/bold magenta]")

    def _describe(self, unit: PresentationUnit) -> str:
        lines = []
        if unit.label:
            lines.append(f"[cyan]{escape(unit.label)}[/cyan]")
        lines.append(escape(unit.text))
        lines.append(f"[dim]{unit.mime_type}, {len(unit.image)} bytes[/dim]")
        return "\n".join(lines)

    def _save(self, unit: PresentationUnit) -> None:
        if self.save_dir is None:
            return
        extension = unit.mime_type.split("/")[-1] if unit.mime_type.startswith("image/") else "bin"
        orientation = unit.orientation.value if unit.orientation else "unknown"
        path = self.save_dir / f"{len(self.saved) + 1:02d}_{unit.card_id}_{orientation}.{extension}"
        path.write_bytes(unit.image)
        self.saved.append(path)
        self.console.print(f"[blue]📁 Saved to: {path}[/blue]")

    def emit(self, unit: PresentationUnit) -> None:
        self.console.print(self._describe(unit))
        self._save(unit)

    def emit_batch(self, units: Sequence[PresentationUnit]) -> None:
        body = "\n\n".join(self._describe(unit) for unit in units)
        self.console.print(Panel(body, title="塔罗牌", expand=False))
        for unit in units:
            self._save(unit)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Draw tarot cards and render readings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--resource-dir",
        type=Path,
        help="Directory holding theme image resources",
    )
    parser.add_argument(
        "--deck",
        type=Path,
        help="Deck source file (JSON or YAML)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for reproducible draws",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Draw command
    draw_parser = subparsers.add_parser("draw", help="Draw a single card")
    draw_parser.add_argument("--theme", help="Theme to draw from (default: random)")
    draw_parser.add_argument(
        "--save",
        action="store_true",
        help="Save the card image to the output directory",
    )

    # Spread command
    spread_parser = subparsers.add_parser("spread", help="Draw a full spread")
    spread_parser.add_argument("--theme", help="Theme to draw from (default: random)")
    spread_parser.add_argument("--formation", help="Formation to use (default: random)")
    spread_parser.add_argument(
        "--batch",
        action="store_true",
        help="Show all cards as one grouped message",
    )
    spread_parser.add_argument(
        "--save",
        action="store_true",
        help="Save the card images to the output directory",
    )

    subparsers.add_parser("themes", help="List themes and their subtypes")
    subparsers.add_parser("formations", help="List configured formations")

    return parser


def _themes_table(catalog: ResourceCatalog) -> Table:
    table = Table(title="Themes")
    table.add_column("Theme")
    table.add_column("Source")
    table.add_column("Subtypes")
    for theme in catalog.themes():
        subtypes = ", ".join(theme.subtypes) if theme.is_available else "[red]unavailable[/red]"
        table.add_row(theme.name, "built-in" if theme.builtin else "custom", subtypes)
    return table


def _formations_table(divination: Divination) -> Table:
    table = Table(title="Formations")
    table.add_column("Formation")
    table.add_column("Cards", justify="right")
    table.add_column("Cut")
    table.add_column("Label-sets", justify="right")
    for name, formation in divination.deck.formations().items():
        table.add_row(
            name,
            str(formation.cards_num),
            "yes" if formation.is_cut else "no",
            str(len(formation.representations)),
        )
    return table


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    seed = args.seed if args.seed is not None else settings.seed
    catalog = ResourceCatalog(args.resource_dir or settings.resource_dir)

    try:
        deck = init_deck(args.deck or settings.deck_file)
        divination = Divination(
            deck,
            catalog,
            rng=random.Random(seed),
            batch=getattr(args, "batch", False) or settings.chain_reply,
        )

        if args.command == "themes":
            console.print(_themes_table(catalog))
            return 0

        if args.command == "formations":
            console.print(_formations_table(divination))
            return 0

        save_dir = settings.ensure_output_dir() if args.save else None
        sink = ConsoleSink(console, save_dir)

        if args.command == "draw":
            divination.divine_once(sink, theme=args.theme)
            return 0

        if args.command == "spread":
            divination.divine_spread(sink, theme=args.theme, formation=args.formation)
            return 0
    except DivinationError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        return 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
