"""
Turn component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import CorporationTurnResult


class StatementSinkPort(Protocol):
    """
    Where settled turn results go (persistence lives outside this package).

    Called from worker threads; implementations must be thread-safe.
    """

    def record(self, result: CorporationTurnResult) -> None:
        """
        Persist one corporation's settled result.

        Raising marks that corporation's settlement as failed; the rest of
        the turn continues.
        """
        ...
