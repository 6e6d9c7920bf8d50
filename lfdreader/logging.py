from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .rmap import MapEntry


def log_resource_map(entries: Sequence[MapEntry], destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    lines: List[str] = []
    for idx, entry in enumerate(entries, start=1):
        lines.append(
            f"#{idx:04d} offset=0x{entry.position:06X} type={entry.tag.rstrip(chr(0)):<4} "
            f"name={entry.name:<8} length={entry.length}"
        )
    destination.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")


@dataclass
class DecodeTraceLogger:
    """Collects one line per decoded resource and writes them on flush()."""

    destination: Path

    def __post_init__(self) -> None:
        self._lines: List[str] = []

    def record(
        self,
        *,
        offset: int,
        tag: str,
        name: str,
        length: int,
        decoder: str,
        note: str | None = None,
    ) -> None:
        line = f"0x{offset:06X} {tag.rstrip(chr(0)):<4} {name:<8} len={length:<7} via {decoder}"
        if note:
            line += f" | {note}"
        self._lines.append(line)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def flush(self) -> None:
        if not self._lines:
            return
        self.destination.parent.mkdir(parents=True, exist_ok=True)
        text = "\n".join(self._lines) + "\n"
        self.destination.write_text(text, encoding="utf-8")
