from __future__ import annotations

import logging
from typing import Any, Protocol

CHANNEL_SETUP_SECRET = "setup.secret_code"
CHANNEL_ADMIN_TOKEN = "setup.admin_token"

SECURE_LOGGER_NAME = "app.setup.secure"


class OutOfBandNotifier(Protocol):
    def deliver(self, channel: str, code: str, context: dict[str, Any]) -> None: ...


class LogNotifier:
    """Hands provisioning codes to an operator through a dedicated log stream.

    The HTTP caller never sees these codes; whoever watches the secure log
    on a trusted terminal relays them to the person completing setup.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(SECURE_LOGGER_NAME)

    def deliver(self, channel: str, code: str, context: dict[str, Any]) -> None:
        self._logger.warning(
            "[SECURE LOG] %s: %s",
            channel,
            code,
            extra={"channel": channel, "delivery_context": context},
        )


def get_notifier() -> OutOfBandNotifier:
    return LogNotifier()
