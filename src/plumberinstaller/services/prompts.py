"""Interactive prompts built on click."""

from typing import List, Optional

import click


class PromptService:
    """Asks the operator for values; required values re-prompt until non-empty."""

    def __init__(self, console):
        self.console = console

    def text(self, message: str, default: Optional[str] = None) -> str:
        while True:
            value = click.prompt(message, default=default or None, type=str).strip()
            if value:
                return value
            self.console.print("[red]  This field is required.[/red]")

    def optional(self, message: str, default: str = "") -> str:
        hint = "" if default else " (leave empty to skip)"
        value = click.prompt(
            f"{message}{hint}",
            default=default,
            show_default=bool(default),
            type=str,
        )
        return value.strip()

    def secret(self, message: str) -> str:
        while True:
            value = click.prompt(message, hide_input=True, default="", show_default=False, type=str)
            if value:
                return value
            self.console.print("[red]  This field is required.[/red]")

    def choice(self, message: str, options: List[str]) -> int:
        """Shows a numbered menu and returns the 1-based index picked."""
        self.console.print(f"[bold]{message}[/bold]")
        for index, option in enumerate(options, start=1):
            self.console.print(f"  {index}. {option}")
        return click.prompt(
            "Choice",
            type=click.IntRange(1, len(options)),
            prompt_suffix=f" (1-{len(options)}): ",
        )

    def confirm(self, message: str, default: bool = True) -> bool:
        return click.confirm(message, default=default)
