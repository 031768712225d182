"""Interactive question service backed by ``rich.prompt``.

Three question kinds are supported: free-text input, yes/no confirmation and
single selection from a list of choices. When the service is not interactive
confirmations fall back to their default and every other question aborts
with a :class:`~appstart.errors.FatalError` naming what must be supplied.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from rich.prompt import Confirm, Prompt

from appstart.errors import FatalError
from appstart.utils import console, print_error, print_table

Validator = Callable[[str], "bool | str"]


@dataclass(frozen=True)
class Choice:
    """One selectable answer of a :meth:`PromptService.select` question."""

    value: str
    label: str
    description: str = ""


def required(value: str) -> bool | str:
    """Validator rejecting empty answers."""
    return True if value and value.strip() else "A value is required."


class PromptService:
    """Ask the user questions, or refuse to when running non-interactively.

    Args:
        interactive: Whether stdin is a person at a terminal.
        auto_confirm: Answer ``yes`` to every confirmation without asking.
    """

    def __init__(self, interactive: bool = True, auto_confirm: bool = False) -> None:
        self.interactive = interactive
        self.auto_confirm = auto_confirm

    async def input(
        self,
        message: str,
        *,
        name: str,
        validate: Validator | None = None,
        default: str | None = None,
    ) -> str:
        if not self.interactive:
            raise FatalError(
                f"{message} cannot be answered in non-interactive mode. Supply {name}."
            )

        while True:
            answer = await asyncio.to_thread(Prompt.ask, message, console=console, default=default)
            answer = (answer or "").strip()
            result = validate(answer) if validate else True
            if result is True:
                return answer
            print_error(result if isinstance(result, str) else "Invalid value.")

    async def confirm(self, message: str, *, default: bool = False) -> bool:
        if self.auto_confirm:
            return True
        if not self.interactive:
            return default
        return await asyncio.to_thread(Confirm.ask, message, console=console, default=default)

    async def select(
        self,
        message: str,
        choices: list[Choice],
        *,
        name: str,
        default: str | None = None,
    ) -> str:
        if not self.interactive:
            raise FatalError(
                f"{message} cannot be answered in non-interactive mode. Supply {name}."
            )
        if not choices:
            raise FatalError(f"No choices available for: {message}")

        print_table(
            [(choice.label, choice.description) for choice in choices],
            headers=("Name", "Description"),
        )
        return await asyncio.to_thread(
            Prompt.ask,
            message,
            console=console,
            choices=[choice.value for choice in choices],
            default=default,
            show_choices=False,
        )
