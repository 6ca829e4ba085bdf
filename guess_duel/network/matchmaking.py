"""Lobby matchmaking over a streamed HTTP response.

Usage:
    client = MatchmakingClient()
    outcome = client.request_match('http://localhost:8080', on_status=print)
    if outcome.is_matched:
        connect(outcome.ws_url)

``request_match`` blocks until the lobby settles the attempt (up to a few
minutes while waiting for an opponent); run it off the UI thread.
"""

import logging
import threading
from typing import Callable, Optional

import requests

from .errors import DuelProtocolError, MatchmakingError
from .framing import LineFrameDecoder
from .protocol import MatchmakingOutcome, MatchmakingStatusRecord, MatchStatus
from ..constants import (
    MATCH_PATH, MATCH_CONNECT_TIMEOUT, MATCH_READ_TIMEOUT, MATCH_CHUNK_SIZE,
)

logger = logging.getLogger(__name__)

# Failure reasons
REASON_SERVER_ERROR = "matchmaking server error"
REASON_INVALID_ADDRESS = "invalid server address"
REASON_INVALID_RESPONSE = "invalid response from server"
REASON_FAILED = "matchmaking failed"
REASON_CANCELLED = "cancelled"


def match_url(server_address: str) -> str:
    """Lobby endpoint for a server address like 'http://host:8080/'."""
    return server_address.strip().rstrip('/') + MATCH_PATH


class MatchmakingClient:
    """Runs one matchmaking attempt per call to ``request_match``."""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout=(MATCH_CONNECT_TIMEOUT, MATCH_READ_TIMEOUT),
                 chunk_size: int = MATCH_CHUNK_SIZE):
        self.session = session or requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    def request_match(
        self,
        server_address: str,
        on_status: Optional[Callable[[str], None]] = None,
        cancelled: Optional[threading.Event] = None,
    ) -> MatchmakingOutcome:
        """Request a match and wait for the lobby's verdict.

        Args:
            server_address: Lobby base URL
            on_status: Called with each status message the lobby streams
            cancelled: Set by the caller to abandon the attempt

        Returns:
            MatchmakingOutcome - always, never raises
        """
        url = match_url(server_address)
        logger.info(f"Requesting match from {url}")

        try:
            resp = self.session.get(url, stream=True, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Matchmaking request failed: {e}")
            return MatchmakingOutcome.failed(REASON_FAILED)

        try:
            if not 200 <= resp.status_code < 300:
                logger.error(f"Matchmaking server returned HTTP {resp.status_code}")
                return MatchmakingOutcome.failed(REASON_SERVER_ERROR)
            return self._read_stream(resp, on_status, cancelled)
        except MatchmakingError as e:
            logger.error(f"Matchmaking failed: {e}")
            return MatchmakingOutcome.failed(str(e))
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Matchmaking stream broken: {e}")
            return MatchmakingOutcome.failed(REASON_FAILED)
        finally:
            resp.close()

    def _read_stream(self, resp, on_status, cancelled) -> MatchmakingOutcome:
        """Consume the response line by line until a terminal record."""
        decoder = LineFrameDecoder()

        for chunk in resp.iter_content(chunk_size=self.chunk_size):
            if cancelled is not None and cancelled.is_set():
                logger.info("Matchmaking attempt cancelled")
                return MatchmakingOutcome.failed(REASON_CANCELLED)
            if not chunk:
                continue

            for line in decoder.feed(chunk):
                outcome = self._handle_line(line, on_status)
                if outcome is not None:
                    return outcome

        decoder.finish()
        raise MatchmakingError(REASON_FAILED)

    def _handle_line(self, line: str, on_status) -> Optional[MatchmakingOutcome]:
        """Dispatch one line. Returns an outcome if the attempt is settled."""
        if not line.strip():
            return None

        try:
            record = MatchmakingStatusRecord.from_line(line)
        except DuelProtocolError as e:
            logger.warning(f"Skipping malformed matchmaking line: {e}")
            return None

        logger.debug(f"Matchmaking status: {record.raw_status} {record.message!r}")

        if record.status == MatchStatus.WAITING:
            _notify(on_status, record.message)
            return None

        if record.status == MatchStatus.MATCHED:
            _notify(on_status, record.message)
            if not record.ws_url:
                raise MatchmakingError(REASON_INVALID_ADDRESS)
            logger.info(f"Matched, duel server at {record.ws_url}")
            return MatchmakingOutcome.matched(record.ws_url)

        if record.status == MatchStatus.TIMEOUT:
            _notify(on_status, record.message)
            logger.info("Matchmaking timed out on server")
            return MatchmakingOutcome.timed_out()

        logger.warning(f"Unexpected matchmaking status: {record.raw_status!r}")
        raise MatchmakingError(REASON_INVALID_RESPONSE)


def _notify(on_status, message: str):
    if on_status and message:
        on_status(message)
