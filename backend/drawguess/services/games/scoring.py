import itertools
from typing import Dict, List, Tuple


class ScoreBoard:
    """Points per display name for the running session.

    Entries survive a participant leaving and rejoining under the same
    name; only :meth:`reset` clears them.
    """

    def __init__(self):
        self._points: Dict[str, int] = {}
        # Sequence number of the award that produced each entry's current
        # total; used to rank equal totals earliest-scored-first.
        self._reached: Dict[str, int] = {}
        self._seq = itertools.count()

    def ensure(self, name: str) -> None:
        if name not in self._points:
            self._points[name] = 0
            self._reached[name] = next(self._seq)

    def award(self, name: str, delta: int) -> int:
        if delta < 0:
            raise ValueError('score delta must not be negative')
        self.ensure(name)
        if delta:
            self._points[name] += delta
            self._reached[name] = next(self._seq)
        return self._points[name]

    def snapshot(self) -> Dict[str, int]:
        return dict(self._points)

    def reset(self) -> None:
        self._points.clear()
        self._reached.clear()

    def discard_if_zero(self, name: str) -> bool:
        if self._points.get(name) != 0:
            return False
        del self._points[name]
        del self._reached[name]
        return True

    def is_empty(self) -> bool:
        return not self._points

    def ranked(self) -> List[Tuple[str, int]]:
        """Entries by descending points; equal totals earliest-scored-first."""
        return sorted(
            self._points.items(),
            key=lambda item: (-item[1], self._reached[item[0]]),
        )


def score_correct_guess(board: ScoreBoard, guesser: str, drawer, guess_points: int, drawer_points: int) -> Dict[str, int]:
    """Apply scoring for a correctly guessed round.

    +guess_points to the guesser; +drawer_points to the drawer when one is
    known. Returns the deltas that were applied.
    """
    deltas = {guesser: guess_points}
    board.award(guesser, guess_points)
    if drawer:
        board.award(drawer, drawer_points)
        deltas[drawer] = deltas.get(drawer, 0) + drawer_points
    return deltas


def leaderboard_payload(ranked: List[Tuple[str, int]]) -> List[dict]:
    return [{'name': name, 'points': points} for name, points in ranked]
