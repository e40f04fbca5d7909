"""Unit tests for notifier selection and logging setup"""

import logging
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from splitledger.api.deps import get_notifier
from splitledger.core import logging_config
from splitledger.models.activity import ActivityType
from splitledger.schemas.event import LedgerEvent
from splitledger.services.notifier import NullNotifier, RedisNotifier


@pytest.fixture
def fresh_notifier_cache():
    """get_notifier is cached per process; start and end each test empty"""
    get_notifier.cache_clear()
    yield
    get_notifier.cache_clear()


@pytest.fixture
def root_logger(monkeypatch):
    """Root logger restored to its prior handlers and level afterwards"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    monkeypatch.setattr(logging_config, "_handler", None)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


class TestGetNotifier:
    """Test notifier selection from settings"""

    def test_disabled_uses_null_notifier(self, fresh_notifier_cache):
        settings = MagicMock(notifications_enabled=False)
        with patch("splitledger.api.deps.get_settings", return_value=settings):
            notifier = get_notifier()

        assert isinstance(notifier, NullNotifier)
        assert not hasattr(notifier, "events")

    def test_enabled_uses_redis(self, fresh_notifier_cache):
        settings = MagicMock(
            notifications_enabled=True,
            redis_url="redis://localhost:6379/0",
            notification_channel_prefix="ledger",
        )
        with patch("splitledger.api.deps.get_settings", return_value=settings):
            notifier = get_notifier()

        assert isinstance(notifier, RedisNotifier)
        assert notifier.channel_prefix == "ledger"

    @pytest.mark.asyncio
    async def test_null_notifier_keeps_nothing(self):
        notifier = NullNotifier()
        event = LedgerEvent(
            type=ActivityType.EXPENSE_CREATED,
            actor_id=uuid4(),
            recipient_ids=[uuid4()],
            summary="Lunch",
        )

        for _ in range(3):
            await notifier.publish(event)

        assert vars(notifier) == {}


class TestConfigureLogging:
    """Test root logging setup"""

    def test_adds_one_handler_across_calls(self, root_logger):
        before = len(root_logger.handlers)

        logging_config.configure_logging("INFO")
        logging_config.configure_logging("DEBUG")

        assert len(root_logger.handlers) == before + 1
        assert root_logger.level == logging.DEBUG
        assert logging_config._handler in root_logger.handlers

    def test_handler_uses_ledger_format(self, root_logger):
        logging_config.configure_logging()

        assert logging_config._handler.formatter._fmt == logging_config.LOG_FORMAT
