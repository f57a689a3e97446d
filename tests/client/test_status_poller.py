"""
Tests for background status polling
"""

import threading
from unittest.mock import Mock

import pytest

from rideshare_client import RideShareAPIError, StatusPoller, ride_status_poller, trip_progress_poller


def sequence(*results):
    """fetch_status stub returning (or raising) each result in turn, then repeating the last"""
    items = list(results)

    def fetch():
        item = items.pop(0) if len(items) > 1 else items[0]
        if isinstance(item, Exception):
            raise item
        return item
    return fetch


class TestPollOnce:

    def test_reports_changes_only(self):
        changes = []
        poller = StatusPoller(sequence('Pending', 'Pending', 'Accepted'), changes.append,
                              terminal_statuses=('Accepted',), interval=5)

        assert poller.poll_once() == 5
        assert poller.poll_once() == 5
        assert poller.poll_once() is None
        assert changes == ['Pending', 'Accepted']
        assert poller.stopped_reason == 'terminal'

    def test_backoff_on_transient_errors(self):
        poller = StatusPoller(sequence(RideShareAPIError('down', 503),
                                       RideShareAPIError('down', 503),
                                       RideShareAPIError('down', 503),
                                       'Pending'),
                              interval=5, max_interval=15, backoff_factor=2)

        assert poller.poll_once() == 10
        assert poller.poll_once() == 15
        assert poller.poll_once() == 15
        assert poller.failures == 3
        assert poller.poll_once() == 5
        assert poller.failures == 0
        assert poller.last_error is None

    def test_network_errors_are_transient(self):
        poller = StatusPoller(sequence(RideShareAPIError('Network error: refused')), interval=1)
        assert poller.poll_once() == 2

    def test_permanent_error_stops(self):
        errors = []
        poller = StatusPoller(sequence(RideShareAPIError('Ride request not found', 404)),
                              on_error=errors.append)

        assert poller.poll_once() is None
        assert poller.stopped_reason == 'permanent_error'
        assert errors[0].status_code == 404

    def test_max_failures(self):
        poller = StatusPoller(sequence(RideShareAPIError('down', 500)), interval=1, max_failures=2)

        assert poller.poll_once() == 2
        assert poller.poll_once() is None
        assert poller.stopped_reason == 'max_failures'


class TestThread:

    def test_stops_at_terminal_status(self):
        accepted = threading.Event()
        poller = StatusPoller(sequence('Pending', 'Accepted'),
                              lambda status: status == 'Accepted' and accepted.set(),
                              terminal_statuses=('Accepted',), interval=0.01)

        poller.start()

        assert accepted.wait(2)
        assert poller.join(2) is True
        assert poller.stopped_reason == 'terminal'

    def test_cancel(self):
        fetch = Mock(return_value='Pending')
        poller = StatusPoller(fetch, interval=0.01)

        with poller:
            assert poller.running
        assert not poller.running
        assert poller.stopped_reason == 'cancelled'

        calls = fetch.call_count
        threading.Event().wait(0.05)
        assert fetch.call_count == calls

    def test_failing_on_change_keeps_polling(self):
        fetch = Mock(side_effect=['Pending', 'Pending', 'Accepted'])
        on_change = Mock(side_effect=RuntimeError('screen gone'))
        poller = StatusPoller(fetch, on_change, terminal_statuses=('Accepted',), interval=0.01)

        poller.start()

        assert poller.join(2) is True
        assert poller.stopped_reason == 'terminal'
        assert poller.status == 'Accepted'
        assert on_change.call_count == 2
        assert fetch.call_count == 3

    def test_failing_on_error_still_stops_on_permanent_error(self):
        on_error = Mock(side_effect=RuntimeError('handler broke'))
        poller = StatusPoller(sequence(RideShareAPIError('Ride request not found', 404)),
                              on_error=on_error, interval=0.01)

        poller.start()

        assert poller.join(2) is True
        assert poller.stopped_reason == 'permanent_error'
        assert poller.last_error.status_code == 404
        on_error.assert_called_once()

    def test_unexpected_error_is_recorded(self):
        poller = StatusPoller(Mock(return_value=['not', 'a', 'status']),
                              terminal_statuses=('Accepted',), interval=0.01)

        poller.start()

        assert poller.join(2) is True
        assert poller.stopped_reason == 'error'
        assert isinstance(poller.last_error, TypeError)

    def test_start_twice_is_harmless(self):
        poller = StatusPoller(Mock(return_value='Pending'), interval=0.01)
        try:
            assert poller.start() is poller
            assert poller.start() is poller
        finally:
            poller.stop()


def test_ride_status_poller():
    api = Mock()
    api.get_ride_status.return_value = 'Accepted'

    poller = ride_status_poller(api, 9)

    assert poller.poll_once() is None
    api.get_ride_status.assert_called_once_with(9)
    assert poller.status == 'Accepted'


def test_trip_progress_poller():
    api = Mock()
    api.get_progress.return_value = {'id': 2, 'progress': 'on progress'}

    poller = trip_progress_poller(api, 2, interval=3)

    assert poller.poll_once() == 3
    api.get_progress.assert_called_once_with(2)
