"""Client-side error taxonomy.

None of these escape the session controller: each is caught at the
boundary where it occurs and turned into a status update or a log line.
"""


class DuelClientError(Exception):
    """Base class for all client errors."""


class MatchmakingError(DuelClientError):
    """A matchmaking attempt ended without a usable duel address."""


class DuelConnectionError(DuelClientError):
    """The duel connection failed to open or dropped unexpectedly."""


class DuelProtocolError(DuelClientError):
    """A line or message from a server could not be interpreted."""


class GuessValidationError(DuelClientError):
    """A guess was rejected locally and never sent."""


class NotYourTurnError(GuessValidationError):
    """A guess was submitted while the opponent is to play."""
