"""
Remembers, per tracked entity, whether it was inside the boundary on the
last sweep, and classifies each new observation as a transition.

Keys are (entity_type, entity_id). A key is never dropped once seen, so an
entity that misses a sweep (no position) keeps its last state. Only reset()
clears the map, at the end of a monitoring session.
"""

from enum import Enum
from typing import Dict, Optional, Tuple

EntityKey = Tuple[str, str]


class Transition(str, Enum):
    FIRST_SIGHTING = "first_sighting"
    EXIT = "exit"
    ENTER = "enter"
    STEADY = "steady"


class EntityStateTracker:
    def __init__(self):
        self._was_inside: Dict[EntityKey, bool] = {}

    def classify(self, key: EntityKey, is_inside: bool) -> Transition:
        """What observing `is_inside` for `key` would mean. Does not store anything."""
        was_inside = self._was_inside.get(key)
        if was_inside is None:
            return Transition.FIRST_SIGHTING
        if was_inside and not is_inside:
            return Transition.EXIT
        if not was_inside and is_inside:
            return Transition.ENTER
        return Transition.STEADY

    def record(self, key: EntityKey, is_inside: bool):
        self._was_inside[key] = is_inside

    def observe(self, key: EntityKey, is_inside: bool) -> Transition:
        transition = self.classify(key, is_inside)
        self.record(key, is_inside)
        return transition

    def get(self, key: EntityKey) -> Optional[bool]:
        return self._was_inside.get(key)

    def snapshot(self) -> Dict[EntityKey, bool]:
        return dict(self._was_inside)

    def reset(self):
        self._was_inside.clear()

    def __contains__(self, key: EntityKey) -> bool:
        return key in self._was_inside

    def __len__(self) -> int:
        return len(self._was_inside)
