"""
Alert Dispatcher

Formats an ``Alert`` for a webhook, Discord or Telegram destination and makes
a single delivery attempt. Failures come back as a ``DeliveryResult``; there
are no retries and nothing is queued.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Literal, Optional, Tuple

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

Severity = Literal["info", "warning", "critical"]
ChannelType = Literal["webhook", "discord", "telegram"]

TELEGRAM_API_BASE_URL = "https://api.telegram.org"

DISCORD_COLORS: Dict[str, int] = {
    "critical": 0xFF0000,
    "warning": 0xFFAA00,
    "info": 0x00FF00,
}

TELEGRAM_EMOJI: Dict[str, str] = {
    "critical": "🚨",
    "warning": "⚠️",
    "info": "ℹ️",
}


class Alert(BaseModel):
    title: str
    message: str
    severity: Severity = "info"
    data: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        frozen = True


class AlertChannelConfig(BaseModel):
    type: str = Field(description="webhook, discord or telegram")
    destination: str = Field(description="Webhook URL, or <bot_token>:<chat_id> for Telegram")
    format: Optional[Literal["text", "embed", "json"]] = None


class DeliveryResult(BaseModel):
    channel: str
    success: bool
    error: Optional[str] = None
    status_code: Optional[int] = None


def parse_telegram_destination(destination: str) -> Optional[Tuple[str, str]]:
    """Split ``<bot_token>:<chat_id>`` on the last colon; bot tokens contain one."""
    bot_token, _, chat_id = (destination or "").rpartition(":")
    if not bot_token or not chat_id:
        return None
    return bot_token, chat_id


def format_payload(alert: Alert, channel: str, chat_id: Optional[str] = None) -> Dict[str, Any]:
    timestamp = alert.timestamp.isoformat()

    if channel == "discord":
        fields = [
            {"name": name, "value": str(value), "inline": True} for name, value in (alert.data or {}).items()
        ]
        return {
            "embeds": [
                {
                    "title": alert.title,
                    "description": alert.message,
                    "color": DISCORD_COLORS.get(alert.severity, DISCORD_COLORS["info"]),
                    "fields": fields,
                    "timestamp": timestamp,
                }
            ]
        }

    if channel == "telegram":
        emoji = TELEGRAM_EMOJI.get(alert.severity, TELEGRAM_EMOJI["info"])
        return {
            "chat_id": chat_id,
            "text": f"{emoji} *{alert.title}*\n\n{alert.message}",
            "parse_mode": "Markdown",
        }

    return {
        "title": alert.title,
        "message": alert.message,
        "severity": alert.severity,
        "data": alert.data,
        "timestamp": timestamp,
    }


class AlertDispatcher:
    def __init__(
        self,
        *,
        telegram_api_base_url: str = TELEGRAM_API_BASE_URL,
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.telegram_api_base_url = telegram_api_base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    def _target(self, config: AlertChannelConfig, alert: Alert) -> Tuple[str, Dict[str, Any]]:
        if config.type == "telegram":
            parsed = parse_telegram_destination(config.destination)
            if parsed is None:
                raise ValueError("Invalid Telegram config")
            bot_token, chat_id = parsed
            url = f"{self.telegram_api_base_url}/bot{bot_token}/sendMessage"
            return url, format_payload(alert, "telegram", chat_id)
        return config.destination, format_payload(alert, config.type)

    async def send_alert(self, alert: Alert, config: AlertChannelConfig) -> DeliveryResult:
        if config.type not in ("webhook", "discord", "telegram"):
            return DeliveryResult(channel=config.type, success=False, error="Unknown alert type")

        try:
            url, payload = self._target(config, alert)
        except ValueError as exc:
            return DeliveryResult(channel=config.type, success=False, error=str(exc))

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                response = await client.post(url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Alert delivery to %s failed: %s", config.type, exc)
            return DeliveryResult(channel=config.type, success=False, error=str(exc) or exc.__class__.__name__)

        if not response.is_success:
            logger.warning("Alert delivery to %s returned HTTP %s", config.type, response.status_code)
            return DeliveryResult(
                channel=config.type,
                success=False,
                error=f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return DeliveryResult(channel=config.type, success=True, status_code=response.status_code)

    async def send_to_channels(self, alert: Alert, configs: Iterable[AlertChannelConfig]) -> List[DeliveryResult]:
        """One result per channel, in the order given."""
        return list(await asyncio.gather(*(self.send_alert(alert, config) for config in configs)))


__all__ = [
    "Alert",
    "AlertChannelConfig",
    "AlertDispatcher",
    "DeliveryResult",
    "Severity",
    "format_payload",
    "parse_telegram_destination",
    "DISCORD_COLORS",
    "TELEGRAM_EMOJI",
]
