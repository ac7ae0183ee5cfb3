"""Membership tiers and the channels each tier may use."""

import uuid
from collections.abc import Awaitable, Callable

DEFAULT_TIER = "free"

# Every tier is limited to email for now; social channels are reserved for paid tiers.
TIER_CHANNELS: dict[str, frozenset[str]] = {
    "free": frozenset({"email"}),
    "supporter": frozenset({"email"}),
    "patron": frozenset({"email"}),
    "admin": frozenset({"email"}),
}


def allowed_channels(tier: str | None) -> frozenset[str]:
    return TIER_CHANNELS.get(tier or DEFAULT_TIER, TIER_CHANNELS[DEFAULT_TIER])


def disallowed_channels(channels: list[str], tier: str | None) -> list[str]:
    """Requested channels the tier may not use, in request order."""
    allowed = allowed_channels(tier)
    return [ch for ch in channels if ch not in allowed]


class TierCache:
    """Memoizes user tier lookups for the duration of one dispatch call.

    Args:
        loader: Coroutine returning a user's tier (or None when unknown).
    """

    def __init__(self, loader: Callable[[uuid.UUID], Awaitable[str | None]]) -> None:
        self._loader = loader
        self._tiers: dict[uuid.UUID, str] = {}

    async def get(self, user_id: uuid.UUID) -> str:
        if user_id not in self._tiers:
            self._tiers[user_id] = (await self._loader(user_id)) or DEFAULT_TIER
        return self._tiers[user_id]
