"""Identity and clock aliases shared across the registry.

Identities are opaque, comparable strings supplied by whatever embeds the
registry (a request context, a transaction sender, the ``--as`` CLI flag).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

Identity: TypeAlias = str

# Zero-argument callable returning the current counter (block height).
Clock: TypeAlias = Callable[[], int]
