"""
Tests for the Alert Dispatcher

Every delivery goes through an httpx.MockTransport; nothing leaves the process.
"""

import json
from datetime import datetime, timezone

import httpx
import pytest
from pydantic import ValidationError

from chainwatch.services.alerts import (
    DISCORD_COLORS,
    Alert,
    AlertChannelConfig,
    AlertDispatcher,
    format_payload,
    parse_telegram_destination,
)

ALERT = Alert(
    title="Whale moved 5 ETH",
    message="Binance -> 0x3333...",
    severity="warning",
    data={"value_usd": 12500, "chain": "ethereum"},
    timestamp=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
)


class Recorder:
    def __init__(self, status=200):
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, json={"ok": self.status < 400})

    @property
    def bodies(self):
        return [json.loads(r.content) for r in self.requests]


# =============================================================================
# Payload formats
# =============================================================================


class TestPayloads:
    """Per-channel body shapes."""

    def test_webhook_body_is_the_alert(self):
        body = format_payload(ALERT, "webhook")

        assert body == {
            "title": "Whale moved 5 ETH",
            "message": "Binance -> 0x3333...",
            "severity": "warning",
            "data": {"value_usd": 12500, "chain": "ethereum"},
            "timestamp": "2024-03-01T12:00:00+00:00",
        }

    def test_discord_embed(self):
        embed = format_payload(ALERT, "discord")["embeds"][0]

        assert embed["color"] == DISCORD_COLORS["warning"]
        assert embed["fields"] == [
            {"name": "value_usd", "value": "12500", "inline": True},
            {"name": "chain", "value": "ethereum", "inline": True},
        ]

    def test_telegram_markdown(self):
        body = format_payload(Alert(title="Gas", message="12 gwei", severity="critical"), "telegram", "-100")

        assert body["chat_id"] == "-100"
        assert body["parse_mode"] == "Markdown"
        assert body["text"].startswith("🚨 *Gas*\n\n")

    def test_alert_is_immutable(self):
        with pytest.raises(ValidationError):
            ALERT.title = "changed"


class TestTelegramDestination:
    """Bot tokens contain a colon; the chat id follows the last one."""

    def test_splits_on_last_colon(self):
        assert parse_telegram_destination("123456:ABC-def:-1001234") == ("123456:ABC-def", "-1001234")

    @pytest.mark.parametrize("destination", ["", "no-colon", ":chat", "token:"])
    def test_rejects_incomplete(self, destination):
        assert parse_telegram_destination(destination) is None


# =============================================================================
# Delivery
# =============================================================================


class TestDelivery:
    """Single attempt; failures are reported, never raised."""

    @pytest.mark.asyncio
    async def test_webhook_success(self):
        recorder = Recorder()
        dispatcher = AlertDispatcher(transport=httpx.MockTransport(recorder))

        result = await dispatcher.send_alert(ALERT, AlertChannelConfig(type="webhook", destination="https://hooks.test/a"))

        assert result.success is True
        assert result.status_code == 200
        assert str(recorder.requests[0].url) == "https://hooks.test/a"
        assert recorder.bodies[0]["severity"] == "warning"

    @pytest.mark.asyncio
    async def test_telegram_url_uses_bot_token(self):
        recorder = Recorder()
        dispatcher = AlertDispatcher(
            telegram_api_base_url="https://telegram.test/", transport=httpx.MockTransport(recorder)
        )

        result = await dispatcher.send_alert(
            ALERT, AlertChannelConfig(type="telegram", destination="123456:ABC-def:-1001234")
        )

        assert result.success is True
        assert str(recorder.requests[0].url) == "https://telegram.test/bot123456:ABC-def/sendMessage"
        assert recorder.bodies[0]["chat_id"] == "-1001234"

    @pytest.mark.asyncio
    async def test_invalid_telegram_config(self):
        recorder = Recorder()
        dispatcher = AlertDispatcher(transport=httpx.MockTransport(recorder))

        result = await dispatcher.send_alert(ALERT, AlertChannelConfig(type="telegram", destination="nochat"))

        assert result.success is False
        assert result.error == "Invalid Telegram config"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_unknown_channel_type(self):
        dispatcher = AlertDispatcher(transport=httpx.MockTransport(Recorder()))

        result = await dispatcher.send_alert(ALERT, AlertChannelConfig(type="pager", destination="x"))

        assert result.success is False
        assert result.error == "Unknown alert type"

    @pytest.mark.asyncio
    async def test_server_error_is_reported(self):
        dispatcher = AlertDispatcher(transport=httpx.MockTransport(Recorder(status=500)))

        result = await dispatcher.send_alert(ALERT, AlertChannelConfig(type="discord", destination="https://discord.test/w"))

        assert result.success is False
        assert result.error == "HTTP 500"
        assert result.status_code == 500

    @pytest.mark.asyncio
    async def test_transport_error_is_reported(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        dispatcher = AlertDispatcher(transport=httpx.MockTransport(refuse))

        result = await dispatcher.send_alert(ALERT, AlertChannelConfig(type="webhook", destination="https://hooks.test/a"))

        assert result.success is False
        assert "connection refused" in result.error
        assert result.status_code is None

    @pytest.mark.asyncio
    async def test_send_to_channels_keeps_order(self):
        def handler(request):
            return httpx.Response(404 if request.url.host == "broken.test" else 204)

        dispatcher = AlertDispatcher(transport=httpx.MockTransport(handler))

        results = await dispatcher.send_to_channels(
            ALERT,
            [
                AlertChannelConfig(type="webhook", destination="https://broken.test/hook"),
                AlertChannelConfig(type="discord", destination="https://discord.test/w"),
                AlertChannelConfig(type="sms", destination="+15550100"),
            ],
        )

        assert [(r.channel, r.success, r.error) for r in results] == [
            ("webhook", False, "HTTP 404"),
            ("discord", True, None),
            ("sms", False, "Unknown alert type"),
        ]
