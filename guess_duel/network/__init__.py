"""Network module: lobby matchmaking and the duel session."""

from .framing import LineFrameDecoder
from .protocol import (
    MatchStatus, MatchmakingStatusRecord, MatchmakingOutcome, OutcomeKind,
    DuelMessageType, DuelMessage, DuelHints, msg_guess,
)
from .phrases import PhraseSet, ENGLISH, CHINESE, get_phrase_set
from .matchmaking import MatchmakingClient
from .session import SessionPhase, SessionState
from .transport import DuelTransport
from .controller import DuelSessionController, validate_guess
