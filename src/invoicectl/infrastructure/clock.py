"""BlockClock — a monotonic counter standing in for a chain's block height.

The registry only ever reads the clock; hosts advance it between calls.
"""

from __future__ import annotations


class BlockClock:
    """Callable, non-decreasing integer counter.

    ``clock()`` returns the current height. ``advance()`` moves it forward;
    moving it backwards raises ``ValueError``.
    """

    def __init__(self, height: int = 0) -> None:
        if height < 0:
            msg = f"Block height cannot be negative: {height}"
            raise ValueError(msg)
        self._height = height

    def __call__(self) -> int:
        return self._height

    @property
    def height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        """Advance by *blocks* (>= 0) and return the new height."""
        if blocks < 0:
            msg = f"Clock cannot move backwards (blocks={blocks})"
            raise ValueError(msg)
        self._height += blocks
        return self._height

    def __repr__(self) -> str:
        return f"BlockClock(height={self._height})"
