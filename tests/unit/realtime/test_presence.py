"""Tests for the presence registry."""

import threading
from uuid import UUID

from chatrelay.realtime.presence import PresenceRegistry

ALICE = UUID("11111111-1111-4111-8111-111111111111")
BOB = UUID("22222222-2222-4222-8222-222222222222")


class TestRegister:
    """Tests for registering live sessions."""

    def test_register_makes_user_visible(self):
        """Test that a registered user is immediately visible to lookups."""
        registry = PresenceRegistry()
        assert registry.register(ALICE, "sid-1", "alice@example.com") is None
        assert registry.lookup(ALICE) == "sid-1"
        assert registry.is_online(ALICE)
        assert registry.count() == 1

    def test_last_registration_wins(self):
        """Test that re-registering leaves exactly one entry, at the newest handle."""
        registry = PresenceRegistry()
        registry.register(ALICE, "sid-1")
        previous = registry.register(ALICE, "sid-2")

        assert previous is not None
        assert previous.handle == "sid-1"
        assert registry.lookup(ALICE) == "sid-2"
        assert registry.count() == 1
        assert registry.list_user_ids() == {ALICE}

    def test_lookup_absent_user(self):
        """Test that looking up an unknown user returns None."""
        assert PresenceRegistry().lookup(ALICE) is None


class TestUnregister:
    """Tests for removing live sessions."""

    def test_unregister_removes_entry(self):
        """Test that unregister removes only the given user."""
        registry = PresenceRegistry()
        registry.register(ALICE, "sid-1")
        registry.register(BOB, "sid-2")

        assert registry.unregister(ALICE) is True
        assert registry.lookup(ALICE) is None
        assert registry.list_user_ids() == {BOB}

    def test_unregister_is_idempotent(self):
        """Test that unregistering twice or an absent user is a no-op."""
        registry = PresenceRegistry()
        registry.register(ALICE, "sid-1")
        registry.register(BOB, "sid-2")

        assert registry.unregister(ALICE) is True
        count_after_first = registry.count()
        assert registry.unregister(ALICE) is False
        assert registry.count() == count_after_first
        assert registry.unregister(UUID(int=0)) is False
        assert registry.count() == count_after_first

    def test_stale_handle_does_not_evict_newer_session(self):
        """Test that removing with an old handle leaves the newer connection registered."""
        registry = PresenceRegistry()
        registry.register(ALICE, "sid-old")
        registry.register(ALICE, "sid-new")

        assert registry.unregister(ALICE, "sid-old") is False
        assert registry.lookup(ALICE) == "sid-new"
        assert registry.unregister(ALICE, "sid-new") is True
        assert registry.count() == 0


class TestSnapshots:
    """Tests for observability reads."""

    def test_sessions_snapshot_ordered_by_connection_time(self):
        """Test that sessions are listed oldest connection first."""
        registry = PresenceRegistry()
        registry.register(ALICE, "sid-1", "alice@example.com")
        registry.register(BOB, "sid-2", "bob@example.com")

        sessions = registry.sessions()
        assert [s.user_id for s in sessions] == [ALICE, BOB]
        assert sessions[0].email == "alice@example.com"

    def test_snapshot_is_a_copy(self):
        """Test that mutating a returned id set does not touch the registry."""
        registry = PresenceRegistry()
        registry.register(ALICE, "sid-1")
        ids = registry.list_user_ids()
        ids.add(BOB)
        assert registry.list_user_ids() == {ALICE}

    def test_concurrent_threads_keep_one_entry_per_user(self):
        """Test that concurrent registrations from threads keep a single entry."""
        registry = PresenceRegistry()

        def worker(n: int) -> None:
            for i in range(200):
                registry.register(ALICE, f"sid-{n}-{i}")
                registry.lookup(ALICE)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.count() == 1
        assert registry.lookup(ALICE) is not None
