"""Interactive questions asked on the terminal."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt


def invalid_path_chars() -> tuple[str, ...]:
    """Characters not allowed in file names on this platform."""
    if sys.platform.startswith("win"):
        return ("*", ":", "?", ">", "<", "|", '"')
    if sys.platform == "darwin":
        return (":",)
    return ()


def validate_location(value: str, is_dir: bool = True) -> Optional[str]:
    """Return an error message, or None when ``value`` is usable."""
    if not value.strip():
        return "Path must not be empty."
    if any(c in value for c in invalid_path_chars()):
        return "Path contains invalid characters."
    path = Path(value).expanduser()
    if is_dir and path.is_file():
        return "Path is already existed as a file."
    if not is_dir and path.is_dir():
        return "File is already existed as a dir."
    return None


def validate_library_name(value: str) -> Optional[str]:
    if not value.strip():
        return "Library name must not be empty."
    if "/" in value or any(c in value for c in invalid_path_chars()):
        return "Library name contains invalid characters."
    return None


def missing_part(path: Path) -> tuple[Path, Path]:
    """Split ``path`` into its deepest existing ancestor and the missing rest."""
    existing = path
    while not existing.exists():
        existing = existing.parent
    return existing, path.relative_to(existing)


class RichPrompter:
    """Prompts built on ``rich.prompt``.

    Invalid answers are rejected and asked again. EOF and Ctrl+C propagate
    and abort the command.
    """

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    def _ask_valid(
        self,
        prompt: str,
        validate: Callable[[str], Optional[str]],
        default: Optional[str] = None,
    ) -> str:
        while True:
            if default is None:
                value = Prompt.ask(prompt, console=self._console)
            else:
                value = Prompt.ask(prompt, default=default, console=self._console)
            problem = validate(value)
            if problem is None:
                return value
            self._console.print(f"[red]{problem}[/red]")

    def ask_for_location(self, default: str, is_dir: bool = True) -> Path:
        """Ask where the library lives, offering to create missing folders."""
        while True:
            value = self._ask_valid(
                "Library Path",
                lambda v: validate_location(v, is_dir),
                default=default,
            )
            path = Path(value).expanduser().absolute()
            existing, missing = missing_part(path)
            if str(missing) == ".":
                return path.resolve()
            if Confirm.ask(
                f"I will create {missing} on the existed folder {existing} for you. "
                "Would that be OK?",
                default=True,
                console=self._console,
            ):
                path.mkdir(parents=True, exist_ok=True)
                return path.resolve()

    def ask_for_library_name(self, default: str) -> str:
        return self._ask_valid("Library Name", validate_library_name, default=default).strip()

    def ask_for_series_name(self, is_taken: Callable[[str], bool]) -> str:
        """Ask for a series name until an unused one is given."""
        def validate(value: str) -> Optional[str]:
            if not value.strip():
                return "Series name must not be empty."
            if is_taken(value):
                return "This name already exists. Choose another one please."
            return None

        return self._ask_valid("Series name", validate)
