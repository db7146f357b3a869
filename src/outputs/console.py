"""
Console output channels.

ConsoleOutput writes framed reports for terminal display,
StdoutOutput writes the bare body (for piping JSON).
"""
from __future__ import annotations


class ConsoleOutput:
    """
    Console output channel.

    Writes formatted reports to stdout with simple headers.

    Example:
        >>> output = ConsoleOutput()
        >>> output.send("Detected peaks", "No peaks detected.")
        === Detected peaks ===
        No peaks detected.
    """

    @property
    def name(self) -> str:
        """Channel identifier."""
        return "console"

    def send(self, subject: str, body: str) -> None:
        """
        Print report to console.

        Args:
            subject: Report title (displayed as header)
            body: Report content
        """
        print(f"\n{'=' * 60}")
        print(f"  {subject}")
        print(f"{'=' * 60}")
        print(body)
        print(f"{'=' * 60}\n")


class StdoutOutput:
    """Writes only the body to stdout, without framing."""

    @property
    def name(self) -> str:
        return "stdout"

    def send(self, subject: str, body: str) -> None:
        print(body)
