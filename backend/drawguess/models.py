from dataclasses import dataclass
from typing import Dict, List, Optional


def fallback_name(sid: str) -> str:
    """Display name used when a participant joins without one."""
    return f"Player_{str(sid)[:4]}"


class Roster:
    """Connected participants in join order.

    Insertion order is the turn rotation. Nothing here is persisted; a
    participant exists exactly as long as its connection.
    """

    def __init__(self):
        self._names: Dict[str, str] = {}

    def add(self, sid: str, requested_name) -> str:
        name = str(requested_name or '').strip() or fallback_name(sid)
        # Re-joining renames in place and keeps the rotation slot
        self._names[sid] = name
        return name

    def remove(self, sid: str) -> Optional[str]:
        return self._names.pop(sid, None)

    def name(self, sid: Optional[str]) -> Optional[str]:
        if sid is None:
            return None
        return self._names.get(sid)

    def size(self) -> int:
        return len(self._names)

    def ids(self) -> List[str]:
        return list(self._names)

    def names(self) -> List[str]:
        return list(self._names.values())

    def next_drawer(self, after_sid: Optional[str]) -> Optional[str]:
        """Participant following ``after_sid``, wrapping to the first.

        Unknown or missing ``after_sid`` yields the first participant.
        """
        ids = self.ids()
        if not ids:
            return None
        if after_sid in self._names:
            return ids[(ids.index(after_sid) + 1) % len(ids)]
        return ids[0]

    def previous(self, sid: str) -> Optional[str]:
        ids = self.ids()
        if sid not in self._names:
            return None
        return ids[(ids.index(sid) - 1) % len(ids)]


@dataclass
class Round:
    drawer_id: str
    drawer_name: str
    word: str
    started_at: float
    ends_at: float

    def seconds_remaining(self, now: float) -> int:
        return max(0, int(round(self.ends_at - now)))


@dataclass
class Session:
    started_at: float
    ends_at: float
    active: bool = True

    def expired(self, now: float) -> bool:
        return now >= self.ends_at

    def seconds_remaining(self, now: float) -> int:
        return max(0, int(round(self.ends_at - now)))
