"""Pytest fixtures for Guess Duel client testing.

Nothing here touches the network: the lobby HTTP session, the duel
transport, the clock and the matchmaking worker thread are all replaced
with in-process fakes.
"""
import json
import pytest
from typing import List, Optional

from guess_duel.network.controller import DuelSessionController
from guess_duel.network.matchmaking import MatchmakingClient


# =============================================================================
# LOBBY FAKES
# =============================================================================

class FakeResponse:
    """Stands in for a streamed requests.Response."""

    def __init__(self, chunks: List[bytes], status_code: int = 200, error: Optional[Exception] = None):
        self.chunks = chunks
        self.status_code = status_code
        self.error = error  # Raised after the last chunk
        self.closed = False
        self.chunk_sizes = []

    def iter_content(self, chunk_size=1):
        self.chunk_sizes.append(chunk_size)
        for chunk in self.chunks:
            yield chunk
        if self.error:
            raise self.error

    def close(self):
        self.closed = True


class FakeHttpSession:
    """Stands in for requests.Session; returns queued responses in order."""

    def __init__(self):
        self.responses: List[FakeResponse] = []
        self.requests: List[dict] = []
        self.error: Optional[Exception] = None

    def queue(self, response: FakeResponse) -> FakeResponse:
        self.responses.append(response)
        return response

    def get(self, url, stream=False, timeout=None):
        self.requests.append({'url': url, 'stream': stream, 'timeout': timeout})
        if self.error:
            raise self.error
        return self.responses.pop(0)


def lobby_lines(*records: dict) -> bytes:
    """Encode records the way the lobby does: one JSON object per line."""
    return b''.join(json.dumps(r, ensure_ascii=False).encode('utf-8') + b'\n' for r in records)


WAITING = {'status': 'waiting', 'message': 'Waiting for opponent...'}
MATCHED = {'status': 'matched', 'message': 'Opponent found!', 'wsUrl': 'ws://duel.test:8081/game'}
TIMEOUT = {'status': 'timeout', 'message': 'No opponent found. Please try again.'}


# =============================================================================
# DUEL FAKES
# =============================================================================

class FakeTransport:
    """Records what the controller does with a duel connection.

    Server-side events are injected with deliver()/server_close()/fail(),
    which post to the controller's queue exactly like DuelTransport does.
    """

    def __init__(self, url, events, source):
        self.url = url
        self.events = events
        self.source = source
        self.opened = False
        self.close_calls = 0
        self.sent: List[dict] = []

    @property
    def is_open(self) -> bool:
        return self.opened and self.close_calls == 0

    def open(self):
        self.opened = True

    def send(self, data: str):
        self.sent.append(json.loads(data))

    def close(self):
        self.close_calls += 1

    # Server side
    def connected(self):
        self.events.put((self.source, 'open', None))

    def deliver(self, msg_type: str, message: str = "", **extra):
        frame = dict(type=msg_type, message=message, **extra)
        self.events.put((self.source, 'message', json.dumps(frame, ensure_ascii=False)))

    def deliver_raw(self, frame: str):
        self.events.put((self.source, 'message', frame))

    def server_close(self):
        self.events.put((self.source, 'closed', 'closed by server'))

    def fail(self, error: str = "connection refused"):
        self.events.put((self.source, 'error', error))


class ManualClock:
    """Monotonic clock advanced by hand."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingUI:
    """Binds every controller callback and records the calls."""

    def __init__(self, controller: DuelSessionController):
        self.calls: List[tuple] = []
        self.statuses: List[tuple] = []
        self.prompts: List[str] = []
        self.hints = []
        self.duel_visible = False
        self.input_enabled = False
        self.match_available = True
        self.range = None
        self.cleared = 0

        controller.on_status = self._status
        controller.on_duel_visible = self._duel_visible
        controller.on_input_enabled = self._input_enabled
        controller.on_range = self._range
        controller.on_match_available = self._match_available
        controller.on_clear_input = self._clear_input
        controller.on_prompt = self._prompt
        controller.on_hints = self.hints.append

    @property
    def status_texts(self) -> List[str]:
        return [text for text, _tone in self.statuses]

    @property
    def last_status(self) -> tuple:
        return self.statuses[-1]

    def _status(self, text, tone):
        self.statuses.append((text, tone))

    def _duel_visible(self, visible):
        self.duel_visible = visible

    def _input_enabled(self, enabled):
        self.input_enabled = enabled

    def _range(self, low, high):
        self.range = (low, high)

    def _match_available(self, available):
        self.match_available = available

    def _clear_input(self):
        self.cleared += 1

    def _prompt(self, text):
        self.prompts.append(text)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def http_session() -> FakeHttpSession:
    return FakeHttpSession()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def transports() -> List[FakeTransport]:
    """Every transport the controller created, in order."""
    return []


@pytest.fixture
def controller(http_session, clock, transports) -> DuelSessionController:
    """Controller wired to fakes; matchmaking runs inline on start_new_match."""
    def make_transport(url, events, source):
        transport = FakeTransport(url, events, source)
        transports.append(transport)
        return transport

    return DuelSessionController(
        matchmaker=MatchmakingClient(session=http_session),
        transport_factory=make_transport,
        clock=clock,
        spawn=lambda target: target(),
    )


@pytest.fixture
def ui(controller) -> RecordingUI:
    return RecordingUI(controller)


@pytest.fixture
def connect(controller, http_session, clock, transports, ui):
    """Factory fixture: run matchmaking to a match and open the duel connection.

    Usage:
        transport = connect()
        transport.deliver('start', "Game started! It's your turn")
        controller.poll()
    """
    def _connect(records=(WAITING, MATCHED)) -> FakeTransport:
        http_session.queue(FakeResponse([lobby_lines(*records)]))
        controller.start_new_match('http://lobby.test:8080')
        controller.poll()
        clock.advance(controller.connect_delay)
        controller.poll()
        transport = transports[-1]
        transport.connected()
        controller.poll()
        return transport
    return _connect


@pytest.fixture
def local_turn(connect, controller):
    """Factory fixture: open a duel where the local player moves first."""
    def _start() -> FakeTransport:
        transport = connect()
        transport.deliver('start', "Game started! It's your turn")
        controller.poll()
        return transport
    return _start
