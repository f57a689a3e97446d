"""
Background status polling for ride requests and trips

Polls on a fixed interval while things go well, backs off exponentially on
transient failures, stops on permanent failures (e.g. 404) and at terminal
statuses, and is cancelled when the owning screen goes away.
"""

import logging
import threading
from typing import Callable, Iterable, Optional

from .api_client import RideShareClient

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0

RIDE_REQUEST_TERMINAL = ('Accepted',)
TRIP_TERMINAL = ('completed',)


class StatusPoller:
    """Polls a status callable on a background thread"""

    def __init__(self, fetch_status: Callable[[], str],
                 on_change: Optional[Callable[[str], None]] = None,
                 terminal_statuses: Iterable[str] = (),
                 interval: float = DEFAULT_INTERVAL,
                 max_interval: float = 60.0,
                 backoff_factor: float = 2.0,
                 max_failures: Optional[int] = None,
                 on_error: Optional[Callable[[Exception], None]] = None,
                 name: str = 'status-poller'):
        self.fetch_status = fetch_status
        self.on_change = on_change
        self.terminal_statuses = set(terminal_statuses)
        self.interval = interval
        self.max_interval = max_interval
        self.backoff_factor = backoff_factor
        self.max_failures = max_failures
        self.on_error = on_error
        self.name = name

        self.status: Optional[str] = None
        self.last_error: Optional[Exception] = None
        self.failures = 0
        self.current_interval = interval
        self.stopped_reason: Optional[str] = None

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> Optional[float]:
        """
        Run one poll.

        Returns:
            Seconds to wait before the next poll, or None when polling
            should stop (terminal status or unrecoverable error).
        """
        try:
            status = self.fetch_status()
        except Exception as e:
            return self._handle_error(e)

        self.failures = 0
        self.last_error = None
        self.current_interval = self.interval

        if status != self.status:
            logger.info(f"{self.name}: status changed {self.status!r} -> {status!r}")
            self.status = status
            self._notify(self.on_change, status)

        if status in self.terminal_statuses:
            self.stopped_reason = 'terminal'
            return None
        return self.interval

    def _handle_error(self, error: Exception) -> Optional[float]:
        self.failures += 1
        self.last_error = error
        self._notify(self.on_error, error)

        if getattr(error, 'is_permanent', False):
            logger.error(f"{self.name}: permanent error, polling stopped: {error}")
            self.stopped_reason = 'permanent_error'
            return None

        if self.max_failures is not None and self.failures >= self.max_failures:
            logger.error(f"{self.name}: giving up after {self.failures} failures: {error}")
            self.stopped_reason = 'max_failures'
            return None

        self.current_interval = min(self.current_interval * self.backoff_factor, self.max_interval)
        logger.warning(f"{self.name}: poll failed ({error}), retrying in {self.current_interval}s")
        return self.current_interval

    def _notify(self, callback, value):
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception(f"{self.name}: callback {getattr(callback, '__name__', callback)!r} failed")

    def start(self):
        if self.running:
            logger.warning(f"{self.name}: already running")
            return self

        self._stop_event.clear()
        self.stopped_reason = None
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = 5.0):
        """Cancel polling and wait for the thread to finish"""
        self._stop_event.set()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        if self.stopped_reason is None:
            self.stopped_reason = 'cancelled'

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for polling to end by itself. Returns True if it has."""
        if self._thread:
            self._thread.join(timeout=timeout)
        return not self.running

    def _run(self):
        while not self._stop_event.is_set():
            try:
                delay = self.poll_once()
            except Exception as e:
                logger.exception(f"{self.name}: polling stopped by unexpected error")
                self.last_error = e
                self.stopped_reason = 'error'
                break
            if delay is None:
                break
            self._stop_event.wait(delay)

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


def ride_status_poller(client: RideShareClient, request_id: int,
                       on_change: Optional[Callable[[str], None]] = None, **kwargs) -> StatusPoller:
    """Poll a ride request until a driver accepts it"""
    kwargs.setdefault('terminal_statuses', RIDE_REQUEST_TERMINAL)
    kwargs.setdefault('name', f'ride-request-{request_id}')
    return StatusPoller(lambda: client.get_ride_status(request_id), on_change, **kwargs)


def trip_progress_poller(client: RideShareClient, progress_id: int,
                         on_change: Optional[Callable[[str], None]] = None, **kwargs) -> StatusPoller:
    """Poll a matched trip until it is completed"""
    kwargs.setdefault('terminal_statuses', TRIP_TERMINAL)
    kwargs.setdefault('name', f'trip-{progress_id}')
    return StatusPoller(lambda: client.get_progress(progress_id)['progress'], on_change, **kwargs)
