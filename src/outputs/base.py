"""
Where peak reports go.

A channel takes the report title and the rendered report (text table or
JSON export) and delivers it: terminal, stdout, a file, or nowhere.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.config import Settings


@runtime_checkable
class OutputChannel(Protocol):
    """Destination for a rendered peak report."""

    @property
    def name(self) -> str:
        """Value accepted by get_channel()."""
        ...

    def send(self, subject: str, body: str) -> None:
        """Deliver the report; raises OutputError when it cannot be written."""
        ...


class OutputError(Exception):
    """Report could not be delivered."""

    def __init__(self, channel: str, message: str) -> None:
        self.channel = channel
        super().__init__(f"[{channel}] {message}")


class OutputConfigError(OutputError):
    """Channel selected without the settings it needs (e.g. no output path)."""


class NullOutput:
    """Drops the report, used for --format none."""

    @property
    def name(self) -> str:
        return "none"

    def send(self, subject: str, body: str) -> None:
        return None


def get_channel(name: str, settings: "Settings") -> OutputChannel:
    """Build the channel called `name`; ValueError for unknown names."""
    # console/file import base, so load them late
    from outputs.console import ConsoleOutput, StdoutOutput
    from outputs.file import FileOutput

    builders: dict[str, Callable[["Settings"], OutputChannel]] = {
        "console": lambda s: ConsoleOutput(),
        "stdout": lambda s: StdoutOutput(),
        "file": FileOutput,
        "none": lambda s: NullOutput(),
    }
    if name not in builders:
        raise ValueError(f"Unknown output channel: {name}")
    return builders[name](settings)
