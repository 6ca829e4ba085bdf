"""Session phase and per-window session state."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Tuple, TYPE_CHECKING

from ..constants import DEFAULT_RANGE

if TYPE_CHECKING:
    from .transport import DuelTransport


class SessionPhase(Enum):
    """Where the local player is in the match lifecycle."""
    IDLE = auto()                   # Nothing in flight, a match can be requested
    MATCHMAKING = auto()            # Lobby request or duel handshake in progress
    AWAITING_OPPONENT_TURN = auto() # In duel, opponent to guess
    LOCAL_TURN = auto()             # In duel, we may guess
    ENDED = auto()                  # Duel result received

    @property
    def in_duel(self) -> bool:
        return self in (SessionPhase.AWAITING_OPPONENT_TURN, SessionPhase.LOCAL_TURN)


@dataclass
class SessionState:
    """Mutable session state, owned by DuelSessionController.

    ``ended`` latches once the duel result arrives, so the close that
    follows is not reported as a lost connection. It is only cleared by
    ``reset()`` when a new match is requested.
    """
    connection: Optional['DuelTransport'] = None
    phase: SessionPhase = SessionPhase.IDLE
    valid_range: Tuple[int, int] = DEFAULT_RANGE
    ended: bool = False

    # Ids of the current lobby attempt and duel connection; events from
    # older ones are stale
    attempt_id: int = 0
    connection_id: int = 0

    @property
    def can_guess(self) -> bool:
        return self.phase == SessionPhase.LOCAL_TURN

    def reset(self):
        """Start a fresh session (keeps the id counters monotonic)."""
        self.connection = None
        self.phase = SessionPhase.IDLE
        self.valid_range = DEFAULT_RANGE
        self.ended = False
