"""Source positions and error reporting shared by every stage."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import TextIO


@dataclass(frozen=True)
class Loc:
    """A line/column location in the source text."""

    line: int = 1
    col: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.col}"


@dataclass(frozen=True)
class Position:
    """A span of source text, from ``start`` to ``end`` inclusive."""

    start: Loc = field(default_factory=Loc)
    end: Loc = field(default_factory=Loc)

    def step(self, c: str) -> Position:
        """Return the position with its end moved past the character ``c``."""
        if c == "\n":
            return replace(self, end=Loc(self.end.line + 1, 0))
        return replace(self, end=Loc(self.end.line, self.end.col + 1))

    def sync(self) -> Position:
        """Return the position collapsed onto its end."""
        return replace(self, start=self.end)

    @classmethod
    def span(cls, first: Position, last: Position) -> Position:
        """Return the position running from the start of ``first`` to the end of ``last``."""
        return cls(first.start, last.end)

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        if self.start.line == self.end.line:
            return f"{self.start}-{self.end.col}"
        return f"{self.start}-{self.end}"


@dataclass
class ErrorManager:
    """Records whether any stage has reported an error."""

    errored: bool = False
    stream: TextIO | None = None

    def client(self) -> ErrorClient:
        """Return a reporter that records its errors on this manager."""
        return ErrorClient(self)


@dataclass(frozen=True)
class ErrorClient:
    """Writes error messages and marks the owning manager as errored."""

    manager: ErrorManager

    def report(self, pos: Position, loc: str, msg: str) -> None:
        stream = self.manager.stream if self.manager.stream is not None else sys.stderr
        print(f"[{pos}] Error{loc}: {msg}", file=stream)
        self.manager.errored = True

    def error(self, pos: Position, msg: str) -> None:
        self.report(pos, "", msg)