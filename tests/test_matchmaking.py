"""Tests for resolving a matchmaking stream into one outcome."""
import threading

import pytest
import requests

from guess_duel.network.matchmaking import (
    MatchmakingClient, match_url,
    REASON_SERVER_ERROR, REASON_INVALID_ADDRESS, REASON_INVALID_RESPONSE,
    REASON_FAILED, REASON_CANCELLED,
)
from guess_duel.network.protocol import MatchmakingOutcome, OutcomeKind
from tests.conftest import FakeResponse, lobby_lines, WAITING, MATCHED, TIMEOUT


@pytest.fixture
def client(http_session) -> MatchmakingClient:
    return MatchmakingClient(session=http_session)


def request(client, statuses=None, cancelled=None) -> MatchmakingOutcome:
    on_status = statuses.append if statuses is not None else None
    return client.request_match('http://lobby.test:8080', on_status=on_status, cancelled=cancelled)


class TestRequest:
    def test_url_and_streaming(self, client, http_session):
        http_session.queue(FakeResponse([lobby_lines(MATCHED)]))
        request(client)
        assert http_session.requests[0]['url'] == 'http://lobby.test:8080/match'
        assert http_session.requests[0]['stream'] is True

    @pytest.mark.parametrize("address, url", [
        ('http://host:8080', 'http://host:8080/match'),
        ('http://host:8080/', 'http://host:8080/match'),
        ('  http://host:8080  ', 'http://host:8080/match'),
    ])
    def test_match_url(self, address, url):
        assert match_url(address) == url

    @pytest.mark.parametrize("status_code", [503, 404, 304, 302])
    def test_non_success_status(self, client, http_session, status_code):
        response = http_session.queue(FakeResponse([lobby_lines(MATCHED)], status_code=status_code))
        outcome = request(client)
        assert outcome == MatchmakingOutcome.failed(REASON_SERVER_ERROR)
        assert response.closed
        assert response.chunk_sizes == []  # Body never read

    def test_connection_refused(self, client, http_session):
        http_session.error = requests.ConnectionError("refused")
        assert request(client) == MatchmakingOutcome.failed(REASON_FAILED)


class TestResolution:
    """Dispatch on each record's status."""

    def test_waiting_then_matched(self, client, http_session):
        statuses = []
        response = http_session.queue(FakeResponse([lobby_lines(
            {'status': 'waiting', 'message': 'm1'},
            {'status': 'matched', 'message': 'm2', 'wsUrl': 'ws://x'},
        )]))
        outcome = request(client, statuses)
        assert outcome == MatchmakingOutcome.matched('ws://x')
        assert statuses == ['m1', 'm2']
        assert response.closed

    def test_resolution_independent_of_chunking(self, client, http_session):
        data = b'{"status":"waiting","message":"m1"}\n{"status":"matched","message":"m2","wsUrl":"ws://x"}\n'
        for size in (1, 4, 9, 33):
            statuses = []
            chunks = [data[i:i + size] for i in range(0, len(data), size)]
            http_session.queue(FakeResponse(chunks))
            assert request(client, statuses) == MatchmakingOutcome.matched('ws://x')
            assert statuses == ['m1', 'm2']

    def test_matched_without_address(self, client, http_session):
        http_session.queue(FakeResponse([b'{"status":"matched","message":"m"}\n']))
        assert request(client) == MatchmakingOutcome.failed(REASON_INVALID_ADDRESS)

    def test_timeout(self, client, http_session):
        statuses = []
        http_session.queue(FakeResponse([lobby_lines(WAITING, TIMEOUT)]))
        assert request(client, statuses).kind == OutcomeKind.TIMED_OUT
        assert statuses == [WAITING['message'], TIMEOUT['message']]

    def test_unrecognized_status(self, client, http_session):
        http_session.queue(FakeResponse([lobby_lines(
            WAITING, {'status': 'error', 'message': 'Failed to create game session'})]))
        assert request(client) == MatchmakingOutcome.failed(REASON_INVALID_RESPONSE)

    def test_stops_reading_after_terminal_record(self, client, http_session):
        statuses = []
        http_session.queue(FakeResponse([lobby_lines(MATCHED, WAITING)]))
        request(client, statuses)
        assert statuses == [MATCHED['message']]

    def test_stream_ends_without_terminal_record(self, client, http_session):
        http_session.queue(FakeResponse([lobby_lines(WAITING)]))
        assert request(client) == MatchmakingOutcome.failed(REASON_FAILED)

    def test_terminal_record_without_newline_is_ignored(self, client, http_session):
        """A line cut off by the server closing is not trusted."""
        http_session.queue(FakeResponse([lobby_lines(WAITING), b'{"status":"matched","wsUrl":"ws://x"}']))
        assert request(client) == MatchmakingOutcome.failed(REASON_FAILED)

    def test_broken_stream(self, client, http_session):
        http_session.queue(FakeResponse([lobby_lines(WAITING)],
                                        error=requests.exceptions.ChunkedEncodingError("reset")))
        assert request(client) == MatchmakingOutcome.failed(REASON_FAILED)


class TestMalformedLines:
    """Bad lines are skipped, not fatal."""

    def test_garbage_lines_skipped(self, client, http_session):
        statuses = []
        http_session.queue(FakeResponse([
            b'not json at all\n',
            b'[1,2,3]\n',
            b'{"message":"no status"}\n',
            b'\n   \n',
            lobby_lines(MATCHED),
        ]))
        assert request(client, statuses) == MatchmakingOutcome.matched(MATCHED['wsUrl'])
        assert statuses == [MATCHED['message']]

    def test_empty_message_not_surfaced(self, client, http_session):
        statuses = []
        http_session.queue(FakeResponse([lobby_lines({'status': 'waiting'}, MATCHED)]))
        request(client, statuses)
        assert statuses == [MATCHED['message']]


class TestCancellation:
    def test_cancelled_before_next_chunk(self, client, http_session):
        cancelled = threading.Event()
        statuses = []

        def on_status(text):
            statuses.append(text)
            cancelled.set()

        response = http_session.queue(FakeResponse([lobby_lines(WAITING), lobby_lines(MATCHED)]))
        outcome = client.request_match('http://lobby.test', on_status=on_status, cancelled=cancelled)

        assert outcome == MatchmakingOutcome.failed(REASON_CANCELLED)
        assert statuses == [WAITING['message']]
        assert response.closed
