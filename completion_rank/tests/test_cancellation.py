"""Tests for CancellationToken."""

import asyncio

from conftest import run

from completion_rank.services.cancellation import CancellationToken


class TestCancellationToken:
    """Tests for the cancelled flag and callbacks."""

    def test_initial_state(self, token):
        """New tokens are not cancelled."""
        assert not token.is_cancelled

    def test_cancel(self, token):
        """cancel() sets the flag."""
        token.cancel()
        assert token.is_cancelled

    def test_callbacks_run_once(self, token):
        """Callbacks fire on the first cancel only."""
        calls = []
        token.on_cancelled(lambda: calls.append(1))
        token.cancel()
        token.cancel()
        assert calls == [1]

    def test_unsubscribe(self, token):
        """Unsubscribed callbacks don't fire."""
        calls = []
        unsubscribe = token.on_cancelled(lambda: calls.append(1))
        unsubscribe()
        unsubscribe()  # Harmless twice
        token.cancel()
        assert calls == []

    def test_already_cancelled_runs_immediately(self, token):
        """Late subscribers are called right away."""
        token.cancel()
        calls = []
        token.on_cancelled(lambda: calls.append(1))
        assert calls == [1]

    def test_failing_callback(self, token, caplog):
        """A failing callback doesn't stop the others."""
        calls = []

        def broken():
            raise RuntimeError("boom")

        token.on_cancelled(broken)
        token.on_cancelled(lambda: calls.append(1))
        token.cancel()
        assert calls == [1]
        assert "boom" in caplog.text


class TestWait:
    """Tests for awaiting cancellation."""

    def test_wait_returns_when_cancelled(self, token):
        """wait() resolves once cancel() is called."""

        async def scenario():
            asyncio.get_running_loop().call_later(0.01, token.cancel)
            await asyncio.wait_for(token.wait(), timeout=1.0)
            return token.is_cancelled

        assert run(scenario())

    def test_wait_on_cancelled_token(self, token):
        """wait() returns at once for a cancelled token."""
        token.cancel()
        run(asyncio.wait_for(token.wait(), timeout=0.1))

    def test_wait_from_thread(self, token):
        """Cancelling from a worker thread wakes the waiter."""

        async def scenario():
            waiter = asyncio.ensure_future(token.wait())
            await asyncio.sleep(0)
            await asyncio.to_thread(token.cancel)
            await asyncio.wait_for(waiter, timeout=1.0)

        run(scenario())


class TestNoneToken:
    """Tests for the shared never-cancelled token."""

    def test_never_cancels(self):
        """cancel() on NONE is ignored."""
        CancellationToken.NONE.cancel()
        assert not CancellationToken.NONE.is_cancelled

    def test_callbacks_ignored(self):
        """Callbacks are never stored."""
        calls = []
        unsubscribe = CancellationToken.NONE.on_cancelled(lambda: calls.append(1))
        unsubscribe()
        assert calls == []
