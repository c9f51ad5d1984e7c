"""
Provider availability cache.
"""

from typing import Dict, Iterable, Optional
import logging

from .base import Availability

logger = logging.getLogger(__name__)


class AvailabilityCache:
    """
    Tri-state availability per provider slot.

    A slot is UNKNOWN until it is first attempted. AVAILABLE and
    UNAVAILABLE are never reverted implicitly; only reset() returns
    slots to UNKNOWN. Updates are single assignments, so concurrent
    tasks may race but always leave a valid state.
    """

    def __init__(self, slots: Iterable[str] = ()):
        self._states: Dict[str, Availability] = {s: Availability.UNKNOWN for s in slots}
        self._errors: Dict[str, str] = {}

    def get(self, slot: str) -> Availability:
        return self._states.get(slot, Availability.UNKNOWN)

    def is_attemptable(self, slot: str) -> bool:
        """UNKNOWN and AVAILABLE slots may be tried."""
        return self.get(slot) is not Availability.UNAVAILABLE

    def mark_available(self, slot: str) -> None:
        self._states[slot] = Availability.AVAILABLE

    def mark_unavailable(self, slot: str, error: Optional[str] = None) -> None:
        if self._states.get(slot) is not Availability.UNAVAILABLE:
            logger.warning(f"Marked {slot} as failed, will use next available provider")
        self._states[slot] = Availability.UNAVAILABLE
        if error:
            self._errors[slot] = error

    def last_error(self, slot: str) -> Optional[str]:
        return self._errors.get(slot)

    def reset(self) -> None:
        """Return every slot to UNKNOWN and forget recorded failures."""
        self._states = {s: Availability.UNKNOWN for s in self._states}
        self._errors = {}

    def snapshot(self) -> Dict[str, str]:
        return {slot: state.value for slot, state in self._states.items()}

    def __contains__(self, slot: str) -> bool:
        return slot in self._states

    def __repr__(self) -> str:
        return f"AvailabilityCache({self.snapshot()!r})"
