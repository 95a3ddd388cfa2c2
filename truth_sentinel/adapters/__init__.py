"""Platform adapters: inbound normalization, media download and reply delivery."""

from truth_sentinel.adapters.telegram import (
    InboundMessage,
    TelegramDelivery,
    TelegramMediaFetcher,
    message_from_update,
)

__all__ = [
    "InboundMessage",
    "TelegramDelivery",
    "TelegramMediaFetcher",
    "message_from_update",
]
