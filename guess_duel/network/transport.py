"""WebSocket connection to the battle server.

Runs network I/O in a background thread with its own asyncio loop so the
pygame loop never blocks. Everything the connection observes is reported
as ``(source, kind, data)`` tuples on a shared queue, where ``source``
is the tag the owner gave this connection:

    ('open', None)          handshake done
    ('message', str)        one inbound frame
    ('closed', str)         connection ended (either side)
    ('error', str)          connection could not be opened or broke
"""

import asyncio
import logging
import threading
from queue import Queue, Empty
from typing import Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from .errors import DuelConnectionError
from ..constants import WS_OPEN_TIMEOUT

logger = logging.getLogger(__name__)


class DuelTransport:
    """One WebSocket connection, opened once and closed once."""

    def __init__(self, url: str, events: Queue, source,
                 open_timeout: float = WS_OPEN_TIMEOUT):
        self.url = url
        self.source = source
        self.open_timeout = open_timeout
        self._events = events
        self._outgoing: Queue = Queue()
        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._connected = False

    @property
    def is_open(self) -> bool:
        return self._running and self._connected

    def open(self):
        """Start connecting (non-blocking)."""
        if self._running:
            return
        self._running = True
        self._thread = threading.Thread(target=self._run_network_thread, daemon=True)
        self._thread.start()

    def send(self, data: str):
        """Queue a text frame for sending."""
        if self._running:
            self._outgoing.put(data)

    def close(self):
        """Close the connection (non-blocking). Safe to call more than once."""
        if not self._running:
            return
        self._running = False
        self._outgoing.put(None)  # Signal send loop to stop

    # =========================================================================
    # NETWORK THREAD
    # =========================================================================

    def _post(self, kind: str, data=None):
        self._events.put((self.source, kind, data))

    def _run_network_thread(self):
        """Run the async network loop in background thread."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            loop.run_until_complete(self._network_main())
        except Exception as e:
            logger.error(f"Duel network thread error: {e}")
            self._post('error', str(e))
        finally:
            loop.close()

    async def _network_main(self):
        """Connect, then pump frames both ways until either side stops."""
        try:
            ws = await websockets.connect(self.url, open_timeout=self.open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            error = DuelConnectionError(f"Could not connect to {self.url}: {e}")
            logger.error(str(error))
            self._post('error', str(error))
            return

        try:
            self._connected = True
            if not self._running:
                return  # Closed while the handshake was in flight

            logger.info(f"Connected to duel server {self.url}")
            self._post('open')

            recv_task = asyncio.create_task(self._receive_loop(ws))
            send_task = asyncio.create_task(self._send_loop(ws))

            done, pending = await asyncio.wait(
                [recv_task, send_task],
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
        finally:
            self._connected = False
            await ws.close()

    async def _receive_loop(self, ws):
        """Forward inbound frames until the connection closes."""
        try:
            async for frame in ws:
                if isinstance(frame, bytes):
                    frame = frame.decode('utf-8', errors='replace')
                self._post('message', frame)
            reason = "closed by server"
        except ConnectionClosed as e:
            reason = f"closed abnormally ({e})"

        logger.info(f"Duel connection {reason}")
        self._post('closed', reason)

    async def _send_loop(self, ws):
        """Send queued frames until close() is called."""
        loop = asyncio.get_running_loop()
        while True:
            try:
                data = await loop.run_in_executor(
                    None,
                    lambda: self._outgoing.get(timeout=0.1)
                )
            except Empty:
                continue

            if data is None:
                break  # Shutdown signal

            try:
                await ws.send(data)
            except ConnectionClosed:
                # Receive loop reports the close and ends both tasks
                logger.warning("Dropped outbound frame, connection already closed")
