"""Duel session controller: matchmaking, duel connection and turn state.

Usage:
    controller = DuelSessionController(phrases=ENGLISH)
    controller.on_status = screen.set_status
    controller.on_input_enabled = screen.set_input_enabled
    ...
    controller.start_new_match('http://localhost:8080')

    # Every frame, from the UI thread
    controller.poll()

    # Guess button / Enter
    controller.submit_guess(screen.guess_text)

All state changes happen inside poll() or the public methods, on the
caller's thread. The matchmaking worker and the duel connection thread
only put ``(source, kind, data)`` events on the queue; poll() takes them
one at a time, in arrival order.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from queue import Queue, Empty
from typing import Any, Callable, Optional, Tuple

from .errors import DuelProtocolError, GuessValidationError, NotYourTurnError
from .matchmaking import MatchmakingClient
from .phrases import ENGLISH, PhraseSet
from .protocol import (
    DuelHints, DuelMessage, DuelMessageType, MatchmakingOutcome, OutcomeKind, msg_guess,
)
from .session import SessionPhase, SessionState
from .transport import DuelTransport
from ..constants import CONNECT_DELAY, DEFAULT_RANGE, GUESS_MIN, GUESS_MAX

logger = logging.getLogger(__name__)

# Event sources
LOBBY = 'lobby'
DUEL = 'duel'


def validate_guess(raw_value: Any, phase: SessionPhase,
                   valid_range: Tuple[int, int] = DEFAULT_RANGE) -> int:
    """Parse a guess from user input.

    The server keeps the turn with a player whose guess falls outside the
    current range but never says so again, so such guesses never leave
    the client.

    Raises:
        GuessValidationError: not an integer, outside GUESS_MIN..GUESS_MAX,
            or outside the current valid range
        NotYourTurnError: valid number but not the local player's turn
    """
    try:
        number = int(str(raw_value).strip())
    except ValueError:
        raise GuessValidationError(f"Not a whole number: {raw_value!r}")

    if not GUESS_MIN <= number <= GUESS_MAX:
        raise GuessValidationError(f"{number} outside {GUESS_MIN}-{GUESS_MAX}")

    if phase != SessionPhase.LOCAL_TURN:
        raise NotYourTurnError(f"Guess {number} submitted during {phase.name}")

    low, high = valid_range
    if not low <= number <= high:
        raise GuessValidationError(f"{number} outside current range {low}-{high}")

    return number


def _spawn_daemon(target: Callable[[], None]):
    threading.Thread(target=target, daemon=True).start()


@dataclass
class DuelSessionController:
    """Owns the session state and the single duel connection."""

    matchmaker: MatchmakingClient = field(default_factory=MatchmakingClient)
    phrases: PhraseSet = ENGLISH
    transport_factory: Callable[..., DuelTransport] = DuelTransport
    clock: Callable[[], float] = time.monotonic
    connect_delay: float = CONNECT_DELAY
    spawn: Callable[[Callable[[], None]], None] = _spawn_daemon

    state: SessionState = field(default_factory=SessionState)

    # UI callbacks (called from the thread that calls poll())
    on_status: Optional[Callable[[str, str], None]] = None  # text, tone
    on_duel_visible: Optional[Callable[[bool], None]] = None
    on_input_enabled: Optional[Callable[[bool], None]] = None
    on_range: Optional[Callable[[int, int], None]] = None
    on_match_available: Optional[Callable[[bool], None]] = None
    on_clear_input: Optional[Callable[[], None]] = None
    on_prompt: Optional[Callable[[str], None]] = None
    on_hints: Optional[Callable[[DuelHints], None]] = None

    # Internal
    _events: Queue = field(default_factory=Queue)
    _cancel_matchmaking: Optional[threading.Event] = None
    _pending_connect: Optional[Tuple[float, str]] = None  # (deadline, ws_url)

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def input_enabled(self) -> bool:
        return self.state.can_guess

    def start_new_match(self, server_address: str):
        """Drop whatever is in progress and ask the lobby for a new match."""
        self._close_connection()
        self._abandon_matchmaking()

        self.state.reset()
        self.state.attempt_id += 1
        attempt_id = self.state.attempt_id
        cancelled = threading.Event()
        self._cancel_matchmaking = cancelled

        self._emit(self.on_match_available, False)
        self._emit(self.on_duel_visible, False)
        self._emit(self.on_range, *DEFAULT_RANGE)
        self._emit(self.on_clear_input)
        self._set_phase(SessionPhase.MATCHMAKING)
        self._status(self.phrases.finding_opponent)

        source = (LOBBY, attempt_id)

        def run():
            outcome = self.matchmaker.request_match(
                server_address,
                on_status=lambda text: self._events.put((source, 'status', text)),
                cancelled=cancelled,
            )
            self._events.put((source, 'outcome', outcome))

        self.spawn(run)

    def submit_guess(self, raw_value: Any) -> bool:
        """Validate and send a guess. Returns True if it was sent."""
        try:
            number = validate_guess(raw_value, self.state.phase, self.state.valid_range)
        except NotYourTurnError as e:
            logger.info(f"Guess rejected: {e}")
            self._emit(self.on_prompt, self.phrases.not_your_turn)
            return False
        except GuessValidationError as e:
            logger.info(f"Guess rejected: {e}")
            self._emit(self.on_prompt, self.phrases.guess_prompt)
            return False

        connection = self.state.connection
        if connection is None or not connection.is_open:
            logger.warning("Guess not sent, duel connection is not open")
            return False

        connection.send(msg_guess(number))
        logger.info(f"Sent guess {number}")
        self._emit(self.on_clear_input)
        self._set_phase(SessionPhase.AWAITING_OPPONENT_TURN)
        return True

    def poll(self):
        """Process pending events. Call once per frame from the UI thread."""
        while True:
            try:
                source, kind, data = self._events.get_nowait()
            except Empty:
                break
            self._dispatch(source, kind, data)

        self._check_pending_connect()

    def shutdown(self):
        """Stop everything (window closing)."""
        self._abandon_matchmaking()
        self._close_connection()

    # =========================================================================
    # EVENT DISPATCH
    # =========================================================================

    def _dispatch(self, source, kind: str, data):
        channel, ident = source

        if channel == LOBBY:
            if ident != self.state.attempt_id or self._cancel_matchmaking is None:
                logger.debug(f"Dropping stale matchmaking event {kind}")
                return
            if kind == 'status':
                self._status(data)
            elif kind == 'outcome':
                self._handle_outcome(data)

        elif channel == DUEL:
            if ident != self.state.connection_id or self.state.connection is None:
                logger.debug(f"Dropping event {kind} from old duel connection")
                return
            if kind == 'open':
                logger.info("Duel connection open, waiting for first message")
            elif kind == 'message':
                self._handle_frame(data)
            elif kind == 'closed':
                self._handle_closed(data)
            elif kind == 'error':
                self._handle_error(data)

    def _handle_outcome(self, outcome: MatchmakingOutcome):
        self._cancel_matchmaking = None

        if outcome.kind == OutcomeKind.MATCHED:
            # Leave "opponent found" on screen for a moment before connecting
            self._pending_connect = (self.clock() + self.connect_delay, outcome.ws_url)
            return

        if outcome.kind == OutcomeKind.TIMED_OUT:
            logger.info("No opponent found before the lobby timed out")
        else:
            logger.warning(f"Matchmaking failed: {outcome.reason}")
            self._status(self.phrases.matchmaking_failed, 'error')

        self._set_phase(SessionPhase.IDLE)
        self._emit(self.on_match_available, True)

    def _check_pending_connect(self):
        if self._pending_connect is None:
            return
        deadline, ws_url = self._pending_connect
        if self.clock() < deadline:
            return
        self._pending_connect = None
        self._open_connection(ws_url)

    def _handle_frame(self, data: str):
        try:
            message = DuelMessage.from_json(data)
        except DuelProtocolError as e:
            logger.error(f"Message parsing error: {e}")
            self._status(self.phrases.message_error, 'error')
            return
        self._handle_message(message)

    def _handle_message(self, message: DuelMessage):
        """Apply one duel message to the session."""
        msg_type = message.type
        text = message.text

        if msg_type == DuelMessageType.WAITING:
            self._emit(self.on_duel_visible, False)
            self._status(text)

        elif msg_type == DuelMessageType.START:
            self._emit(self.on_duel_visible, True)
            self._status(text)
            self._set_range(DEFAULT_RANGE)
            self._apply_turn_text(message)

        elif msg_type == DuelMessageType.UPDATE:
            if not self.state.phase.in_duel:
                logger.warning(f"Ignoring update outside a duel ({self.state.phase.name})")
                return
            self._status(text)
            self._apply_turn_text(message)

        elif msg_type == DuelMessageType.END:
            self.state.ended = True
            self._status(text, self.phrases.result_tone(text))
            self._emit(self.on_duel_visible, False)
            self._set_phase(SessionPhase.ENDED)
            self._emit(self.on_match_available, True)

        elif msg_type == DuelMessageType.ERROR:
            self._status(text, 'error')

        else:
            logger.warning(f"Unknown message type: {message.raw_type!r}")

    def _apply_turn_text(self, message: DuelMessage):
        """Range, hints and whose turn, all read from a start/update message."""
        new_range = self.phrases.extract_range(message.text)
        if new_range is not None:
            self._set_range(new_range)

        if message.hints.revealed:
            self._emit(self.on_hints, message.hints)

        starting = message.type == DuelMessageType.START
        if self.phrases.is_local_turn(message.text, starting):
            self._set_phase(SessionPhase.LOCAL_TURN)
        else:
            self._set_phase(SessionPhase.AWAITING_OPPONENT_TURN)

    def _handle_closed(self, reason: str):
        self.state.connection = None
        if self.state.ended:
            logger.info(f"Duel connection {reason} after the result")
        else:
            logger.warning(f"Duel connection lost: {reason}")
            self._status(self.phrases.connection_lost, 'error')
            self._emit(self.on_duel_visible, False)
        self._set_phase(SessionPhase.IDLE)
        self._emit(self.on_match_available, True)

    def _handle_error(self, error: str):
        logger.error(f"Duel connection error: {error}")
        self._close_connection()
        self._status(self.phrases.connection_error, 'error')
        self._emit(self.on_duel_visible, False)
        self._set_phase(SessionPhase.IDLE)
        self._emit(self.on_match_available, True)

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def _open_connection(self, ws_url: str):
        self._close_connection()
        self.state.connection_id += 1
        source = (DUEL, self.state.connection_id)
        logger.info(f"Connecting to duel server {ws_url}")
        connection = self.transport_factory(ws_url, self._events, source)
        self.state.connection = connection
        connection.open()

    def _close_connection(self):
        connection = self.state.connection
        if connection is None:
            return
        self.state.connection = None
        connection.close()

    def _abandon_matchmaking(self):
        if self._cancel_matchmaking is not None:
            logger.info("Abandoning in-flight matchmaking attempt")
            self._cancel_matchmaking.set()
            self._cancel_matchmaking = None
        self._pending_connect = None

    # =========================================================================
    # STATE + UI HELPERS
    # =========================================================================

    def _set_phase(self, phase: SessionPhase):
        if phase != self.state.phase:
            logger.debug(f"Phase {self.state.phase.name} -> {phase.name}")
        self.state.phase = phase
        self._emit(self.on_input_enabled, phase == SessionPhase.LOCAL_TURN)

    def _set_range(self, new_range: Tuple[int, int]):
        self.state.valid_range = new_range
        self._emit(self.on_range, *new_range)

    def _status(self, text: str, tone: str = 'info'):
        self._emit(self.on_status, text, tone)

    @staticmethod
    def _emit(callback, *args):
        if callback:
            callback(*args)
