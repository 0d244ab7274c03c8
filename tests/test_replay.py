"""
Unit Tests for the Replay Guard
===============================
"""


class TestInMemoryReplayGuard:
    """Tests for consume-once tracking."""

    def test_record_then_consume(self):
        """A recorded token is live until consumed once."""
        from lessotp.replay import InMemoryReplayGuard

        guard = InMemoryReplayGuard()

        guard.record("tok")
        assert guard.is_live("tok") is True
        assert "tok" in guard

        assert guard.consume("tok") is True
        assert guard.is_live("tok") is False
        assert guard.consume("tok") is False

    def test_unknown_token_not_live(self):
        """Tokens never recorded are not live; consuming them is not an error."""
        from lessotp.replay import InMemoryReplayGuard

        guard = InMemoryReplayGuard()

        assert guard.is_live("never-issued") is False
        assert guard.consume("never-issued") is False

    def test_disabled_guard(self):
        """With protection disabled every token is live and nothing is stored."""
        from lessotp.replay import InMemoryReplayGuard

        guard = InMemoryReplayGuard(enabled=False)

        guard.record("tok")

        assert len(guard) == 0
        assert guard.is_live("anything") is True
        assert guard.consume("anything") is True
        assert guard.consume("anything") is True

    def test_purge_expired(self):
        """Explicit purge drops expired and keeps unbounded tokens."""
        from lessotp.replay import InMemoryReplayGuard

        guard = InMemoryReplayGuard()
        guard.record("old", expires_at=1000)
        guard.record("new", expires_at=5000)
        guard.record("forever")

        removed = guard.purge_expired(now_ms=2000)

        assert removed == 1
        assert "old" not in guard
        assert "new" in guard
        assert "forever" in guard
        assert len(guard) == 2

    def test_no_automatic_eviction(self):
        """Expired tokens stay until purged."""
        from lessotp.replay import InMemoryReplayGuard

        guard = InMemoryReplayGuard()
        guard.record("old", expires_at=1)

        assert guard.is_live("old") is True

    def test_satisfies_protocol(self):
        """The in-memory guard implements ReplayGuard."""
        from lessotp.replay import InMemoryReplayGuard, ReplayGuard

        assert isinstance(InMemoryReplayGuard(), ReplayGuard)
