from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple

from .models import MatchingPair, Notification, Severity, Side

logger = logging.getLogger(__name__)

NotifyCallback = Callable[[Notification], None]


class PairingAutomaton:
    """Turns clicks on the two matching columns into committed pairs.

    One pending selection is kept per column. A click on the opposite column
    while a selection is pending commits the pair; a second click on the
    pending item clears it. Items of committed pairs are reported by
    ``is_disabled`` until the pair is undone or all pairs are cleared; callers
    must not feed them back into ``select``.
    """

    def __init__(self, pairable_count: int = 0, notify: Optional[NotifyCallback] = None):
        self.pairable_count = pairable_count
        self.pending_left: Optional[str] = None
        self.pending_right: Optional[str] = None
        self._committed: List[MatchingPair] = []
        self._notify = notify

    @property
    def committed(self) -> Tuple[MatchingPair, ...]:
        return tuple(self._committed)

    @property
    def all_matched(self) -> bool:
        return self.pairable_count > 0 and len(self._committed) >= self.pairable_count

    def _emit(self, message: str, severity: Severity) -> None:
        logger.debug("Pairing notification [%s]: %s", severity.value, message)
        if self._notify:
            self._notify(Notification(message=message, severity=severity))

    def is_disabled(self, content: str, side: Side) -> bool:
        if side == Side.left:
            return any(pair.left == content for pair in self._committed)
        return any(pair.right == content for pair in self._committed)

    def reject_disabled(self) -> None:
        self._emit("This item is already matched. Undo the pair to change it.", Severity.warning)

    def select(self, content: str, side: Side) -> Optional[MatchingPair]:
        own =self.pending_left if side == Side.left else self.pending_right
        other = self.pending_right if side == Side.left else self.pending_left
        if own == content:
            self._set_pending(side, None)
            return None
        if other is None:
            self._set_pending(side, content)
            return None
        if side == Side.left:
            pair = MatchingPair(left=content, right=other)
        else:
            pair = MatchingPair(left=other, right=content)
        self.pending_left = None
        self.pending_right = None
        if pair in self._committed:
            self._emit("This pair already exists!", Severity.info)
            return None
        self._committed.append(pair)
        self._emit("Pair created successfully!", Severity.success)
        if self.pairable_count > 0 and len(self._committed) == self.pairable_count:
            self._emit("All pairs matched for this section!", Severity.success)
        return pair

    def _set_pending(self, side: Side, content: Optional[str]) -> None:
        if side == Side.left:
            self.pending_left = content
        else:
            self.pending_right = content

    def undo_last_pair(self) -> Optional[MatchingPair]:
        if not self._committed:
            return None
        pair = self._committed.pop()
        self._emit("Last pair removed", Severity.info)
        return pair

    def clear_all_pairs(self) -> bool:
        if not self._committed:
            return False
        self._committed.clear()
        self.pending_left = None
        self.pending_right = None
        self._emit("All pairs cleared!", Severity.info)
        return True

    def load(self, pairs: Iterable[MatchingPair] = (), pairable_count: Optional[int] = None) -> None:
        """Replace the editing state with previously saved pairs, without notifications."""
        if pairable_count is not None:
            self.pairable_count = pairable_count
        self._committed = list(pairs)
        self.pending_left = None
        self.pending_right = None
