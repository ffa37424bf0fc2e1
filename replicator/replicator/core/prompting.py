"""Operator prompts used while resolving conflicts."""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol

import click
import typer


class Prompter(Protocol):
    """Capability for asking the operator questions."""

    def ask_text(self, message: str, default: str | None = None) -> str: ...

    def ask_choice(
        self, message: str, choices: Mapping[str, str], default: str | None = None
    ) -> str: ...

    def ask_confirm(self, message: str, default: bool = False) -> bool: ...


class TyperPrompter:
    """Interactive prompter backed by typer's terminal prompts."""

    def ask_text(self, message: str, default: str | None = None) -> str:
        return typer.prompt(message, default=default)

    def ask_choice(
        self, message: str, choices: Mapping[str, str], default: str | None = None
    ) -> str:
        for key, label in choices.items():
            typer.echo(f"  {key}: {label}")
        return typer.prompt(
            message,
            type=click.Choice(list(choices), case_sensitive=False),
            default=default,
        ).lower()

    def ask_confirm(self, message: str, default: bool = False) -> bool:
        return typer.confirm(message, default=default)


class ScriptedPrompter:
    """Non-interactive prompter that replays queued answers.

    Answers are consumed in order. Every question asked is kept in
    ``asked`` so callers can assert on what the operator would have seen.
    """

    def __init__(self, answers: Iterable[str | bool] = ()) -> None:
        self._answers = list(answers)
        self.asked: list[str] = []

    def _next(self, message: str) -> str | bool:
        self.asked.append(message)
        if not self._answers:
            raise LookupError(f"No scripted answer for prompt: {message!r}")
        return self._answers.pop(0)

    def ask_text(self, message: str, default: str | None = None) -> str:
        return str(self._next(message))

    def ask_choice(
        self, message: str, choices: Mapping[str, str], default: str | None = None
    ) -> str:
        answer = str(self._next(message)).lower()
        if answer not in choices:
            raise ValueError(f"{answer!r} is not one of {sorted(choices)}")
        return answer

    def ask_confirm(self, message: str, default: bool = False) -> bool:
        return bool(self._next(message))
