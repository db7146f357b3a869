"""
File output channel.

Writes the report body (e.g. the JSON export) to settings.output_path.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from outputs.base import OutputConfigError, OutputError

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger("file_output")


class FileOutput:
    """Output channel writing the body to a file (subject is ignored)."""

    def __init__(self, settings: "Settings") -> None:
        """
        Raises:
            OutputConfigError: If no output path is configured
        """
        if not settings.output_path:
            raise OutputConfigError("file", "No output path configured (GF_OUTPUT_PATH / --output)")
        self._path = Path(settings.output_path)

    @property
    def name(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path

    def send(self, subject: str, body: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(body + "\n", encoding="utf-8")
        except OSError as e:
            raise OutputError(self.name, f"Cannot write {self._path}: {e}") from e
        logger.info("Wrote %s to %s", subject, self._path)
