"""Round/session controller for the shared draw-and-guess game.

One :class:`GameSession` owns the whole game for the process: the roster,
the score board, the current round and session, and every pending timer.
Inbound participant events and timer callbacks both enter through methods
that hold ``self._lock`` so no two transitions ever interleave.

Timers live in named slots (``countdown``, ``round``, ``round_tick``,
``intermission``, ``session``, ``score_reset``). Scheduling a slot cancels
whatever was there, and a callback only runs if its handle is still the one
stored in its slot, so a superseded timer can never act on a newer phase.
"""

import logging
import threading
from typing import Any, Dict, Optional

from drawguess.models import Roster, Round, Session, fallback_name
from .scoring import ScoreBoard, leaderboard_payload, score_correct_guess
from .words import WordPool


SYSTEM = 'System'

PHASE_IDLE = 'idle'
PHASE_COUNTDOWN = 'countdown'
PHASE_ROUND_ACTIVE = 'round_active'
PHASE_INTERMISSION = 'intermission'
PHASE_ENDED = 'ended'

REASON_GUESSED = 'guessed'
REASON_TIMED_OUT = 'timed out'
REASON_DRAWER_LEFT = 'drawer left'
REASON_NOT_ENOUGH_PLAYERS = 'not enough players'
REASON_SESSION_OVER = 'session over'

_ROUND_END_MESSAGES = {
    REASON_GUESSED: 'Round ended! The word was "{word}"',
    REASON_TIMED_OUT: 'Time\'s up! The word was "{word}"',
    REASON_DRAWER_LEFT: '{drawer} (the drawer) left. The word was "{word}"',
    REASON_NOT_ENOUGH_PLAYERS: 'Round cancelled. The word was "{word}"',
    REASON_SESSION_OVER: 'Game time is over! The word was "{word}"',
}

TIMER_SLOTS = ('countdown', 'round', 'round_tick', 'intermission', 'session', 'score_reset')

DEFAULT_SETTINGS = {
    'MIN_PLAYERS': 2,
    'COUNTDOWN_DURATION_SEC': 20,
    'ROUND_DURATION_SEC': 60,
    'INTERMISSION_SEC': 5,
    'SESSION_DURATION_SEC': 600,
    'SCORE_RESET_DELAY_SEC': 10,
    'STATE_TICK_SEC': 1,
    'GUESS_POINTS': 10,
    'DRAWER_POINTS': 5,
    'CANCEL_COUNTDOWN_BELOW_MIN': True,
}


class GameSession:

    def __init__(self, gateway, scheduler, words: Optional[WordPool] = None,
                 settings: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        self.gateway = gateway
        self.scheduler = scheduler
        self.words = words or WordPool()
        self._log = logger or logging.getLogger(__name__)

        merged = dict(DEFAULT_SETTINGS)
        for key in DEFAULT_SETTINGS:
            if settings and settings.get(key) is not None:
                merged[key] = settings[key]
        self.min_players = int(merged['MIN_PLAYERS'])
        self.countdown_duration = int(merged['COUNTDOWN_DURATION_SEC'])
        self.round_duration = int(merged['ROUND_DURATION_SEC'])
        self.intermission = int(merged['INTERMISSION_SEC'])
        self.session_duration = int(merged['SESSION_DURATION_SEC'])
        self.score_reset_delay = int(merged['SCORE_RESET_DELAY_SEC'])
        self.state_tick = int(merged['STATE_TICK_SEC'])
        self.guess_points = int(merged['GUESS_POINTS'])
        self.drawer_points = int(merged['DRAWER_POINTS'])
        self.cancel_countdown_below_min = bool(merged['CANCEL_COUNTDOWN_BELOW_MIN'])
        for key, value in (('COUNTDOWN_DURATION_SEC', self.countdown_duration),
                           ('ROUND_DURATION_SEC', self.round_duration),
                           ('SESSION_DURATION_SEC', self.session_duration),
                           ('STATE_TICK_SEC', self.state_tick)):
            if value <= 0:
                raise ValueError(f"{key} must be positive, got {value}")

        self.roster = Roster()
        self.scores = ScoreBoard()
        self.phase = PHASE_IDLE
        self.round: Optional[Round] = None
        self.session: Optional[Session] = None
        self.countdown_remaining: Optional[int] = None
        # Last drawer in the rotation; the next round starts after it
        self._rotation_anchor: Optional[str] = None
        self._timers: Dict[str, Any] = {}
        self._lock = threading.RLock()

    @classmethod
    def from_config(cls, config, gateway, scheduler, logger=None):
        words = WordPool(config.get('WORD_LIST') or None)
        return cls(gateway, scheduler, words=words, settings=config, logger=logger)

    # ---- read-only views ----

    @property
    def session_active(self) -> bool:
        return self.session is not None and self.session.active

    @property
    def current_drawer_id(self) -> Optional[str]:
        return self.round.drawer_id if self.round else None

    def display_name(self, sid: str, claimed=None) -> str:
        return self.roster.name(sid) or (str(claimed).strip() if claimed else '') or fallback_name(sid)

    def game_state(self) -> Dict[str, Any]:
        now = self.scheduler.now()
        return {
            'active': self.session_active,
            'phase': self.phase,
            'currentDrawerName': self.round.drawer_name if self.round else None,
            'hasActiveWord': bool(self.round and self.round.word),
            'roundSecondsRemaining': self.round.seconds_remaining(now) if self.round else None,
            'sessionSecondsRemaining': self.session.seconds_remaining(now) if self.session else None,
        }

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'phase': self.phase,
                'state': self.game_state(),
                'players': self.roster.names(),
                'scores': self.scores.snapshot(),
                'leaderboard': leaderboard_payload(self.scores.ranked()),
                'countdown': self.countdown_remaining,
                'durations': {
                    'countdown': self.countdown_duration,
                    'round': self.round_duration,
                    'intermission': self.intermission,
                    'session': self.session_duration,
                    'score_reset': self.score_reset_delay,
                },
            }

    def leaderboard(self):
        with self._lock:
            return self.scores.ranked()

    def pending_timers(self):
        return sorted(slot for slot, handle in self._timers.items() if handle.pending)

    # ---- notifications ----

    def _announce(self, text: str) -> None:
        self.gateway.emit_all('chatMessage', {'from': SYSTEM, 'text': text})

    def _tell(self, sid: str, text: str) -> None:
        self.gateway.emit_to(sid, 'chatMessage', {'from': SYSTEM, 'text': text})

    def _broadcast_user_list(self) -> None:
        self.gateway.emit_all('userList', self.roster.names())

    def _broadcast_scores(self) -> None:
        self.gateway.emit_all('scoreUpdate', {'scores': self.scores.snapshot()})

    def _broadcast_game_state(self) -> None:
        self.gateway.emit_all('gameState', self.game_state())

    # ---- timers ----

    def _schedule(self, slot: str, delay: float, fn) -> None:
        if slot not in TIMER_SLOTS:
            raise ValueError(f"unknown timer slot {slot!r}")
        self._cancel(slot)
        handle = None

        def _fire():
            with self._lock:
                if self._timers.get(slot) is not handle:
                    self._log.info(f"[timer-abort] slot={slot} superseded")
                    return
                del self._timers[slot]
                self._log.debug(f"[timer-fire] slot={slot}")
                fn()

        handle = self.scheduler.call_later(delay, _fire, label=slot)
        self._timers[slot] = handle
        self._log.debug(f"[timer-set] slot={slot} delay={delay}s")

    def _cancel(self, slot: str) -> None:
        handle = self._timers.pop(slot, None)
        if handle is not None:
            handle.cancel()

    def _cancel_all(self) -> None:
        for slot in list(self._timers):
            self._cancel(slot)

    # ---- inbound participant events ----

    def connect(self, sid: str) -> None:
        with self._lock:
            self.gateway.emit_to(sid, 'scoreUpdate', {'scores': self.scores.snapshot()})
            self.gateway.emit_to(sid, 'userList', self.roster.names())
            self.gateway.emit_to(sid, 'gameState', self.game_state())

    def join(self, sid: str, requested_name) -> str:
        with self._lock:
            previous_name = self.roster.name(sid)
            name = self.roster.add(sid, requested_name)
            self.scores.ensure(name)
            if previous_name is not None and previous_name != name:
                self._rename(sid, previous_name, name)
            self._log.info(f"[join] sid={sid} name={name} players={self.roster.size()}")

            self._broadcast_user_list()
            self._broadcast_scores()
            self._tell(sid, f"Welcome {name}!")
            self.gateway.emit_others(sid, 'chatMessage', {'from': SYSTEM, 'text': f"{name} joined the game"})

            self._maybe_start_countdown()
            self._broadcast_game_state()
            return name

    def _rename(self, sid: str, old: str, new: str) -> None:
        if self.round is not None and self.round.drawer_id == sid:
            self.round.drawer_name = new
        # Old name keeps its entry only if it has points or is still in use
        if old not in self.roster.names():
            self.scores.discard_if_zero(old)
        self._log.info(f"[rename] sid={sid} {old} -> {new}")

    def leave(self, sid: str) -> None:
        with self._lock:
            name = self.roster.name(sid)
            if name is None:
                return
            was_drawer = self.round is not None and self.round.drawer_id == sid
            if sid == self._rotation_anchor:
                # Keep the pre-departure rotation: the next drawer is whoever
                # followed the departed one.
                prev = self.roster.previous(sid)
                self._rotation_anchor = prev if prev != sid else None
            self.roster.remove(sid)
            self._log.info(f"[leave] sid={sid} name={name} drawer={was_drawer} players={self.roster.size()}")

            if not was_drawer:
                self._announce(f"{name} left the game")
            self._broadcast_user_list()

            if self.roster.size() == 0:
                if self.phase != PHASE_IDLE:
                    self._halt('everyone left')
                return

            if was_drawer:
                self._end_round(REASON_DRAWER_LEFT)
            elif self.session_active and self.roster.size() < self.min_players:
                if self.round is not None:
                    self._end_round(REASON_NOT_ENOUGH_PLAYERS)
                else:
                    self._announce('Not enough players. Waiting for more players...')
                    self._end_session()
            elif (self.phase == PHASE_COUNTDOWN and self.roster.size() < self.min_players
                    and self.cancel_countdown_below_min):
                self._cancel_countdown()
            self._broadcast_game_state()

    def stroke(self, sid: str, stroke) -> bool:
        with self._lock:
            if sid != self.current_drawer_id:
                self._log.debug(f"[stroke-drop] sid={sid} not drawer")
                return False
            if not isinstance(stroke, dict) or not stroke.get('from') or not stroke.get('to'):
                return False
            self.gateway.emit_others(sid, 'remoteStroke', stroke)
            return True

    def clear(self, sid: str) -> bool:
        with self._lock:
            if sid != self.current_drawer_id:
                self._log.debug(f"[clear-drop] sid={sid} not drawer")
                return False
            self._log.info(f"[clear] by={self.roster.name(sid)}")
            self.gateway.emit_all('clearBoard')
            return True

    def chat(self, sid: str, claimed_from, text) -> None:
        with self._lock:
            if not str(text or '').strip():
                return
            self.gateway.emit_all('chatMessage', {'from': self.display_name(sid, claimed_from), 'text': str(text)})

    def guess(self, sid: str, claimed_from, text) -> bool:
        """Broadcast a guess and score it when it matches the secret word.

        Returns True when the guess ended the round.
        """
        with self._lock:
            guess_text = str(text or '').strip()
            if not guess_text:
                return False
            player = self.display_name(sid, claimed_from)
            self.gateway.emit_all('chatMessage', {'from': player, 'text': guess_text})

            round_ = self.round
            if round_ is None or sid == round_.drawer_id:
                return False
            if guess_text.casefold() != round_.word.casefold():
                return False

            drawer_name = self.roster.name(round_.drawer_id)
            deltas = score_correct_guess(self.scores, player, drawer_name, self.guess_points, self.drawer_points)
            self._log.info(f"[guess] correct word={round_.word} deltas={deltas}")
            if drawer_name:
                self._announce(
                    f"{player} guessed correctly! +{self.guess_points} points. "
                    f"{drawer_name} gets +{self.drawer_points} points!"
                )
            else:
                self._announce(f"{player} guessed correctly! +{self.guess_points} points.")
            self._broadcast_scores()
            self._end_round(REASON_GUESSED)
            return True

    def start_game(self, sid: str) -> bool:
        with self._lock:
            if self.session_active:
                self._tell(sid, 'A game is already in progress.')
                return False
            if self.roster.size() < self.min_players:
                self._tell(sid, f"At least {self.min_players} players are required to start.")
                return False
            self._log.info(f"[start] manual by={self.roster.name(sid)}")
            self._start_session()
            return True

    def stop_game(self, sid: str) -> bool:
        with self._lock:
            if not self.session_active and self.phase != PHASE_COUNTDOWN:
                self._tell(sid, 'No game is running.')
                return False
            self._halt(f"stopped by {self.display_name(sid)}")
            self._announce('Game stopped.')
            return True

    # ---- countdown ----

    def _maybe_start_countdown(self) -> None:
        if self.phase == PHASE_IDLE and self.roster.size() >= self.min_players:
            self._start_countdown()

    def _start_countdown(self) -> None:
        self.phase = PHASE_COUNTDOWN
        self.countdown_remaining = self.countdown_duration
        self._log.info(f"[countdown-start] seconds={self.countdown_duration}")
        self._announce(f"Game starting in {self.countdown_duration} seconds!")
        self.gateway.emit_all('countdown', {'secondsRemaining': self.countdown_remaining})
        self._schedule('countdown', 1, self._on_countdown_tick)

    def _on_countdown_tick(self) -> None:
        if self.phase != PHASE_COUNTDOWN:
            return
        self.countdown_remaining -= 1
        self.gateway.emit_all('countdown', {'secondsRemaining': max(0, self.countdown_remaining)})
        if self.countdown_remaining > 0:
            self._schedule('countdown', 1, self._on_countdown_tick)
        elif self.roster.size() < self.min_players:
            self._cancel_countdown()
            self._broadcast_game_state()
        else:
            self._start_session()

    def _cancel_countdown(self) -> None:
        self._cancel('countdown')
        self.countdown_remaining = None
        self.phase = PHASE_IDLE
        self._log.info('[countdown-cancel] not enough players')
        self._announce('Countdown cancelled. Waiting for more players...')

    # ---- session ----

    def _start_session(self) -> None:
        self._cancel('countdown')
        self._cancel('score_reset')
        self.countdown_remaining = None
        self.scores.reset()
        self._seed_scores()

        now = self.scheduler.now()
        self.session = Session(started_at=now, ends_at=now + self.session_duration)
        self._rotation_anchor = None
        self._log.info(f"[session-start] players={self.roster.size()} duration={self.session_duration}s")
        self._announce('The game has started!')
        self._broadcast_scores()
        self._schedule('session', self.session_duration, self._on_session_timeout)
        self._start_round()

    def _on_session_timeout(self) -> None:
        if not self.session_active:
            return
        self._log.info('[session-timeout]')
        if self.round is not None:
            self._end_round(REASON_SESSION_OVER, end_session=True)
        else:
            self._end_session()

    def _end_session(self) -> None:
        self._cancel_all()
        ranked = self.scores.ranked()
        winner = None
        if not self.scores.is_empty() and ranked[0][1] > 0:
            winner = ranked[0][0]
        self._log.info(f"[session-end] winner={winner} scores={dict(ranked)}")

        self.gateway.emit_all('sessionEnded', {
            'winner': winner,
            'finalScores': self.scores.snapshot(),
            'leaderboard': leaderboard_payload(ranked),
        })
        if winner:
            self._announce(f"Game over! {winner} wins with {ranked[0][1]} points!")
        else:
            self._announce('Game over! Nobody scored this time.')

        self.round = None
        self.session = None
        self._rotation_anchor = None
        self.phase = PHASE_ENDED
        self._broadcast_game_state()
        self._schedule('score_reset', self.score_reset_delay, self._on_score_reset)

    def _on_score_reset(self) -> None:
        self.scores.reset()
        self._seed_scores()
        self.phase = PHASE_IDLE
        self._log.info('[score-reset]')
        self._broadcast_scores()
        self._maybe_start_countdown()
        self._broadcast_game_state()

    def _halt(self, why: str) -> None:
        """Tear everything down without a leaderboard."""
        self._cancel_all()
        self.round = None
        self.session = None
        self.countdown_remaining = None
        self._rotation_anchor = None
        self.phase = PHASE_IDLE
        self.scores.reset()
        self._seed_scores()
        self._log.info(f"[stop] {why}")
        self._broadcast_scores()
        self._broadcast_game_state()

    def _seed_scores(self) -> None:
        for name in self.roster.names():
            self.scores.ensure(name)

    # ---- rounds ----

    def _start_round(self) -> None:
        self.round = None
        drawer_id = self.roster.next_drawer(self._rotation_anchor)
        if drawer_id is None:
            self._log.info('[round-abort] no eligible drawer')
            self.phase = PHASE_INTERMISSION
            self._broadcast_game_state()
            return

        now = self.scheduler.now()
        drawer_name = self.roster.name(drawer_id)
        round_ = Round(
            drawer_id=drawer_id,
            drawer_name=drawer_name,
            word=self.words.pick(),
            started_at=now,
            ends_at=now + self.round_duration,
        )
        self.round = round_
        self._rotation_anchor = drawer_id
        self.phase = PHASE_ROUND_ACTIVE
        self._log.info(f"[round-start] drawer={drawer_name} word={round_.word}")

        self.gateway.emit_all('clearBoard')
        self._announce(f"{drawer_name} is now drawing! Guess the word!")
        self.gateway.emit_to(drawer_id, 'yourWord', {'word': round_.word})
        self._broadcast_game_state()

        self._schedule('round', self.round_duration, lambda: self._on_round_timeout(round_))
        self._schedule('round_tick', self.state_tick, lambda: self._on_round_tick(round_))

    def _on_round_timeout(self, round_: Round) -> None:
        if self.round is not round_:
            self._log.info('[timer-abort] stale round timeout')
            return
        self._end_round(REASON_TIMED_OUT)

    def _on_round_tick(self, round_: Round) -> None:
        if self.round is not round_:
            return
        self._broadcast_game_state()
        self._schedule('round_tick', self.state_tick, lambda: self._on_round_tick(round_))

    def _end_round(self, reason: str, end_session: bool = False) -> None:
        round_ = self.round
        if round_ is None:
            return
        self._cancel('round')
        self._cancel('round_tick')
        self.round = None
        self.phase = PHASE_INTERMISSION
        self._log.info(f"[round-end] reason={reason} word={round_.word}")
        self._announce(_ROUND_END_MESSAGES[reason].format(word=round_.word, drawer=round_.drawer_name))
        self._broadcast_game_state()

        below_min = self.roster.size() < self.min_players
        if below_min:
            self._announce('Not enough players. Waiting for more players...')
        if end_session or below_min or (self.session and self.session.expired(self.scheduler.now())):
            self._end_session()
            return
        self._schedule('intermission', self.intermission, self._on_intermission_elapsed)

    def _on_intermission_elapsed(self) -> None:
        if not self.session_active:
            return
        if self.roster.size() < self.min_players:
            self._announce('Not enough players. Waiting for more players...')
            self._end_session()
            return
        self._start_round()
