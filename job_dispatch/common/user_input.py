from __future__ import annotations

from typing import Optional, Protocol, Sequence

from rich.console import Console
from rich.prompt import IntPrompt, Prompt
from rich.table import Table

from job_dispatch import log
from job_dispatch.exceptions import UserCancelledError

logger = log.get_logger("job_dispatch")


class Prompter(Protocol):
    def select_one(self, label: str, options: Sequence[str]) -> int:
        ...

    def read_line(self, label: str, default: Optional[str] = None) -> str:
        ...


class RichPrompter:
    """
    Terminal prompter. Interrupts (Ctrl-C, EOF) raise :class:`UserCancelledError`.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def select_one(self, label: str, options: Sequence[str]) -> int:
        self.console.print(label, style="bold")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("#", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        for i, option in enumerate(options, start=1):
            table.add_row(str(i), option)
        self.console.print(table)

        choices = [str(i) for i in range(1, len(options) + 1)]
        try:
            selected = IntPrompt.ask(
                "Select", console=self.console, choices=choices, show_choices=False
            )
        except (KeyboardInterrupt, EOFError) as e:
            raise UserCancelledError("Selection aborted") from e
        return selected - 1

    def read_line(self, label: str, default: Optional[str] = None) -> str:
        try:
            if default is None:
                return Prompt.ask(label, console=self.console, default="", show_default=False)
            return Prompt.ask(label, console=self.console, default=default)
        except (KeyboardInterrupt, EOFError) as e:
            raise UserCancelledError(f"Prompt `{label}` aborted") from e


class NonInteractivePrompter:
    """
    Prompter for runs without a terminal: selections fail and every line is empty.
    """

    def select_one(self, label: str, options: Sequence[str]) -> int:
        raise UserCancelledError(
            f"{label}: {len(options)} candidates and no terminal to choose from; "
            "pass the source name explicitly"
        )

    def read_line(self, label: str, default: Optional[str] = None) -> str:
        logger.debug(f"Non-interactive run, no answer for `{label}`.")
        return ""
