"""
Service Layer Tests
"""

import pytest

from fakes import FakeWakeLock


class TestConfigService:
    """Configuration Service Tests"""

    def test_singleton(self, config_path):
        """Test singleton pattern."""
        from services.config_service import ConfigService

        config1 = ConfigService(config_path)
        config2 = ConfigService(config_path)
        assert config1 is config2

    def test_defaults(self, config_path):
        from services.config_service import ConfigService

        config = ConfigService(config_path)
        assert config.get("player.backend") == "vlc"
        assert config.get("schedule.enabled") is False
        assert config.get("missing.key", 42) == 42

    def test_get_returns_copies(self, config_path):
        from services.config_service import ConfigService

        config = ConfigService(config_path)
        config.set("queue", [{"source": "x"}])
        config.get("queue").append({"source": "y"})
        assert config.get("queue") == [{"source": "x"}]

    def test_reset(self, config_path):
        from services.config_service import ConfigService

        config = ConfigService(config_path)
        config.set("logging.level", "DEBUG")
        config.reset()
        assert config.get("logging.level") == "INFO"


class TestAccountService:
    """Account slots"""

    def setup_method(self):
        from services.config_service import ConfigService
        ConfigService.reset_instance()

    def _service(self, config_path):
        from services.account_service import AccountService
        from services.config_service import ConfigService
        config = ConfigService(config_path)
        return config, AccountService(config)

    def test_always_three_slots(self, config_path):
        config, service = self._service(config_path)
        accounts = service.get_accounts()
        assert len(accounts) == 3
        assert all(not a.is_active for a in accounts)

    def test_save_and_active_account(self, config_path):
        from models.account import Account

        config, service = self._service(config_path)
        assert service.save_accounts([
            Account("  first@example.com ", enabled=False),
            Account("second@example.com", enabled=True),
        ]) is True

        accounts = service.get_accounts()
        assert accounts[0].email == "first@example.com"
        assert len(config.get("accounts")) == 3
        assert service.active_account().email == "second@example.com"

    def test_enabled_without_email_is_not_active(self, config_path):
        from models.account import Account

        _config, service = self._service(config_path)
        service.save_accounts([Account("", enabled=True)])
        assert service.active_account() is None

    def test_malformed_storage_resets(self, config_path):
        config, service = self._service(config_path)
        config.set("accounts", "not a list")
        assert len(service.get_accounts()) == 3


class TestQueueStore:
    """Editable queue rows"""

    def _store(self, config_path, rows=None):
        from services.config_service import ConfigService
        from services.queue_store import QueueStore
        config = ConfigService(config_path)
        if rows is not None:
            config.set("queue", rows)
        return config, QueueStore(config)

    def test_loads_rows_and_bare_strings(self, config_path):
        _config, store = self._store(config_path, [
            {"source": "abc", "loop_limit": 2, "delay_seconds": 3, "slot_id": "row-a"},
            "https://youtu.be/dQw4w9WgXcQ",
            42,
        ])
        entries = store.entries()
        assert len(entries) == 2
        assert entries[0].slot_id == "row-a"
        assert entries[0].loop_limit == 2
        assert entries[1].source == "https://youtu.be/dQw4w9WgXcQ"

    def test_add_update_remove(self, config_path):
        _config, store = self._store(config_path)
        entry = store.add("  abc  ", loop_limit=1)
        assert entry.source == "abc"

        assert store.update(entry.slot_id, delay_seconds=4).delay_seconds == 4
        assert store.update("unknown", delay_seconds=4) is None

        assert store.remove(entry.slot_id) is True
        assert store.remove(entry.slot_id) is False
        assert store.entries() == []

    def test_save_persists_rows(self, config_path):
        from services.config_service import ConfigService
        from services.queue_store import QueueStore

        config, store = self._store(config_path)
        entry = store.add("abc", loop_limit=5, delay_seconds=1)
        assert store.save() is True

        ConfigService.reset_instance()
        reloaded = QueueStore(ConfigService(config_path))
        assert reloaded.get(entry.slot_id).loop_limit == 5


class TestStatusService:
    """Status line rendering"""

    def _status(self, wake_lock=None):
        from core.event_bus import EventBus, EventType
        from services.status_service import StatusService

        bus = EventBus()
        published = []
        bus.subscribe(EventType.STATUS_CHANGED, published.append)
        return StatusService(bus, wake_lock), published

    def test_initial_status(self):
        status, _ = self._status()
        assert status.current.message == "Initializing..."

    def test_update_publishes(self):
        status, published = self._status(FakeWakeLock())
        status.update("Loading: x", "row-1")

        assert published[-1].message == "Loading: x"
        assert published[-1].active_slot_id == "row-1"
        assert published[-1].text == "Status: Loading: x"

    @pytest.mark.parametrize("raw", [
        "Status: Queue finished.",
        "Queue finished. (Screen Lock Active \U0001F512)",
        "Status: Queue finished. (Screen Lock not supported)",
    ])
    def test_prefix_and_suffix_are_not_duplicated(self, raw):
        status, _ = self._status()
        snapshot = status.update(raw)
        assert snapshot.message == "Queue finished."
        assert snapshot.text == "Status: Queue finished. (Screen Lock not supported)"

    def test_wake_lock_suffix(self):
        lock = FakeWakeLock()
        status, _ = self._status(lock)
        lock.acquire()
        assert status.refresh().text == "Status: Initializing... (Screen Lock Active \U0001F512)"
