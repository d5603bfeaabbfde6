from typing import Dict, List, Tuple
from engine.model import Event

class EventLog:
    """Append-only event storage for match replay and streaming."""

    def __init__(self):
        self._log: List[Event] = []
        self._turn_start: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._log)

    def append_many(self, evts: List[Event]) -> Tuple[int, int]:
        """Append events and return (start_offset, end_offset)."""
        start = len(self._log)
        for offset, e in enumerate(evts, start):
            self._turn_start.setdefault(e.turn, offset)
        self._log.extend(evts)
        return start, len(self._log) - 1

    def since(self, offset: int, limit: int = 1000) -> Tuple[List[Event], int]:
        """Return events starting from offset, up to limit, and the next offset."""
        offset = max(0, offset)
        chunk = self._log[offset: offset + limit]
        return chunk, offset + len(chunk)

    def for_turn(self, turn: int) -> List[Event]:
        """All events stamped with one turn number."""
        start = self._turn_start.get(turn)
        if start is None:
            return []
        return [e for e in self._log[start:] if e.turn == turn]
