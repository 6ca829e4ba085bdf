"""Wire records for the lobby and duel protocols.

Lobby (HTTP, one JSON object per line):
    {"status": "waiting" | "matched" | "timeout", "message": "...",
     "wsUrl": "ws://host:port/game"}     (wsUrl only on "matched")

Duel (WebSocket, one JSON object per frame):
    Server → Client:
        {"type": "waiting" | "start" | "update" | "end" | "error",
         "message": "...", "isEven": -1|0|1, "sum": -1|n, "isPrime": -1|0|1}
    Client → Server:
        {"type": "guess", "number": 1..100}
"""

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional

from .errors import DuelProtocolError


# =============================================================================
# LOBBY
# =============================================================================

class MatchStatus(Enum):
    """Status carried by one matchmaking stream record."""
    WAITING = 'waiting'
    MATCHED = 'matched'
    TIMEOUT = 'timeout'
    UNKNOWN = 'unknown'     # Anything else the server sends


@dataclass
class MatchmakingStatusRecord:
    """One decoded line of the matchmaking stream."""
    status: MatchStatus
    message: str = ""
    ws_url: Optional[str] = None
    raw_status: str = ""

    @classmethod
    def from_line(cls, line: str) -> 'MatchmakingStatusRecord':
        """Parse one stream line. Raises DuelProtocolError if unusable."""
        obj = _load_object(line)

        raw_status = obj.get('status')
        if not isinstance(raw_status, str):
            raise DuelProtocolError(f"Record without status: {line!r}")

        try:
            status = MatchStatus(raw_status)
        except ValueError:
            status = MatchStatus.UNKNOWN

        ws_url = obj.get('wsUrl')
        if not isinstance(ws_url, str) or not ws_url:
            ws_url = None

        return cls(
            status=status,
            message=_text(obj.get('message')),
            ws_url=ws_url,
            raw_status=raw_status,
        )


class OutcomeKind(Enum):
    """Terminal result of a matchmaking attempt."""
    MATCHED = auto()
    TIMED_OUT = auto()
    FAILED = auto()


@dataclass(frozen=True)
class MatchmakingOutcome:
    """Exactly one of these is produced per matchmaking attempt."""
    kind: OutcomeKind
    ws_url: Optional[str] = None
    reason: str = ""

    @classmethod
    def matched(cls, ws_url: str) -> 'MatchmakingOutcome':
        return cls(OutcomeKind.MATCHED, ws_url=ws_url)

    @classmethod
    def timed_out(cls) -> 'MatchmakingOutcome':
        return cls(OutcomeKind.TIMED_OUT)

    @classmethod
    def failed(cls, reason: str) -> 'MatchmakingOutcome':
        return cls(OutcomeKind.FAILED, reason=reason)

    @property
    def is_matched(self) -> bool:
        return self.kind == OutcomeKind.MATCHED


# =============================================================================
# DUEL
# =============================================================================

class DuelMessageType(Enum):
    """Inbound duel message types."""
    WAITING = 'waiting'     # Connected, opponent not there yet
    START = 'start'         # Duel begins, text tells whose turn
    UPDATE = 'update'       # After each guess: new range + whose turn
    END = 'end'             # Duel over, text tells who won
    ERROR = 'error'         # Server rejected something (e.g. not your turn)
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class DuelHints:
    """Properties of the secret number revealed by the server.

    The server sends -1 for a hint it chose not to reveal; those are None here.
    """
    is_even: Optional[bool] = None
    digit_sum: Optional[int] = None
    is_prime: Optional[bool] = None

    @property
    def revealed(self) -> bool:
        return self.is_even is not None or self.digit_sum is not None or self.is_prime is not None

    @classmethod
    def from_dict(cls, obj: Dict[str, Any]) -> 'DuelHints':
        return cls(
            is_even=_flag(obj.get('isEven')),
            digit_sum=_count(obj.get('sum')),
            is_prime=_flag(obj.get('isPrime')),
        )


@dataclass
class DuelMessage:
    """One inbound duel message."""
    type: DuelMessageType
    text: str = ""
    raw_type: str = ""
    hints: DuelHints = field(default_factory=DuelHints)

    @classmethod
    def from_json(cls, data: str) -> 'DuelMessage':
        """Parse one WebSocket frame. Raises DuelProtocolError if not a JSON object."""
        obj = _load_object(data)
        raw_type = _text(obj.get('type'))

        try:
            msg_type = DuelMessageType(raw_type)
        except ValueError:
            msg_type = DuelMessageType.UNKNOWN
        if msg_type == DuelMessageType.UNKNOWN:
            return cls(type=msg_type, raw_type=raw_type)

        hints = DuelHints()
        if msg_type in (DuelMessageType.START, DuelMessageType.UPDATE):
            hints = DuelHints.from_dict(obj)

        return cls(
            type=msg_type,
            text=_text(obj.get('message')),
            raw_type=raw_type,
            hints=hints,
        )


def msg_guess(number: int) -> str:
    """Outbound guess frame."""
    return json.dumps({'type': 'guess', 'number': number})


# =============================================================================
# HELPERS
# =============================================================================

def _load_object(data: str) -> Dict[str, Any]:
    try:
        obj = json.loads(data)
    except json.JSONDecodeError as e:
        raise DuelProtocolError(f"Invalid JSON: {e}") from e
    if not isinstance(obj, dict):
        raise DuelProtocolError(f"Expected JSON object, got {type(obj).__name__}")
    return obj


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _flag(value: Any) -> Optional[bool]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value == 1


def _count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value
