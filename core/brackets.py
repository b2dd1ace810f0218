"""Balanced-bracket scanning for C++ prototypes printed by dumpbin."""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

OPEN_FOR_CLOSE: dict[str, str] = {
    ")": "(",
    "]": "[",
    "}": "{",
    ">": "<",
}

OPEN_CHARS = frozenset(OPEN_FOR_CLOSE.values())


@dataclass(frozen=True)
class BracketPair:
    open_char: str
    close_char: str
    open_index: int
    close_index: int
    nest_level: int  # outermost pair is 1


class BalancedBracketScanner:
    """Finds matched bracket pairs in *text*.

    Round, square, curly and angled brackets share one nesting stack, so a
    close must match the most recently opened kind. The first unbalanced or
    mismatched close stops the scan and discards every pair found so far.
    """

    def __init__(self, text: str | None) -> None:
        self.text = text or ""
        self.pairs: list[BracketPair] = []
        self.failures: list[str] = []
        self._scan()

    @property
    def success(self) -> bool:
        return not self.failures

    @property
    def count(self) -> int:
        return len(self.pairs)

    def get(self, index: int) -> str:
        """Text strictly inside pair *index*; ``-1`` returns the whole text."""
        if index < 0:
            return self.text
        pair = self.pairs[index]
        return self.text[pair.open_index + 1:pair.close_index]

    def _scan(self) -> None:
        stack: list[int] = []
        found: list[BracketPair] = []
        for index, c in enumerate(self.text):
            if c in OPEN_CHARS:
                stack.append(index)
            elif c in OPEN_FOR_CLOSE:
                if not stack:
                    self.failures.append(f"Unbalanced close symbol {c!r} at index {index}")
                    return
                open_index = stack[-1]
                open_char = self.text[open_index]
                if open_char != OPEN_FOR_CLOSE[c]:
                    self.failures.append(
                        f"Mismatched close symbol {c!r} at {index}; "
                        f"the open symbol is {open_char!r} at {open_index}"
                    )
                    return
                stack.pop()
                found.append(BracketPair(
                    open_char=open_char,
                    close_char=c,
                    open_index=open_index,
                    close_index=index,
                    nest_level=len(stack) + 1,
                ))
        found.sort(key=lambda p: p.open_index)
        self.pairs = found
