"""Tests for CancellationToken."""

import threading
from unittest.mock import Mock

from wt_finder.utils.cancellation import CancellationToken


class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_initial_state(self):
        assert not CancellationToken().is_cancelled

    def test_callbacks_fire_once(self):
        token = CancellationToken()
        callback = Mock()
        token.add_callback(callback)

        token.cancel()
        token.cancel()

        assert token.is_cancelled
        callback.assert_called_once_with()

    def test_unregistered_callback_does_not_fire(self):
        token = CancellationToken()
        callback = Mock()
        unregister = token.add_callback(callback)

        unregister()
        token.cancel()

        callback.assert_not_called()

    def test_late_registration_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        callback = Mock()

        token.add_callback(callback)

        callback.assert_called_once_with()

    def test_failing_callback_does_not_stop_others(self):
        token = CancellationToken()
        second = Mock()
        token.add_callback(Mock(side_effect=RuntimeError("boom")))
        token.add_callback(second)

        token.cancel()

        second.assert_called_once_with()

    def test_cancel_from_another_thread(self):
        token = CancellationToken()
        fired = threading.Event()
        token.add_callback(fired.set)

        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()

        assert fired.is_set()
        assert token.is_cancelled
