"""
Output channels for peak reports.

Provides different output destinations (console, stdout, file)
implementing a common OutputChannel protocol.
"""
from outputs.base import OutputChannel, get_channel
from outputs.console import ConsoleOutput, StdoutOutput
from outputs.file import FileOutput

__all__ = ["OutputChannel", "get_channel", "ConsoleOutput", "StdoutOutput", "FileOutput"]
