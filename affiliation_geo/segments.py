"""Split a cleaned affiliation into semicolon segments and comma-pieces."""

from __future__ import annotations

from dataclasses import dataclass

SEGMENT_DELIMITER = ";"
PIECE_DELIMITER = ","


@dataclass(frozen=True)
class Segment:
    text: str
    pieces: tuple[str, ...]  # most -> least specific

    @property
    def last(self) -> str:
        return self.pieces[-1] if self.pieces else ""

    @property
    def second_last(self) -> str:
        return self.pieces[-2] if len(self.pieces) > 1 else ""

    @property
    def is_empty(self) -> bool:
        return not self.pieces


def split_pieces(text: str) -> tuple[str, ...]:
    return tuple(p.strip() for p in text.split(PIECE_DELIMITER) if p.strip())


def split_segments(text: str) -> list[Segment]:
    """One Segment per semicolon slice, in input order (empty slices included)."""
    return [Segment(text=part, pieces=split_pieces(part)) for part in (text or "").split(SEGMENT_DELIMITER)]
