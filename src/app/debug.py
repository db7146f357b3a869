from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

@dataclass
class DebugBuffer:
    """
    Sammeln und Rendern von Debug-Informationen fuer die Console.
    Haelt Stufen-Statistiken der Gipfelerkennung (Punkte, Stopps, Cluster).
    """
    lines: List[str] = field(default_factory=list)

    def add(self, line: str) -> None:
        self.lines.append(line)

    def extend(self, items: List[str]) -> None:
        self.lines.extend(items)

    def as_text(self) -> str:
        return "\n".join(self.lines)
