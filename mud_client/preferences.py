from __future__ import annotations

import logging

import redis
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

WALLET_PREFS_KEY_PREFIX = "mud_client:wallet_prefs:"  # + {principal}


class WalletPreferences(BaseModel):
    hide_zero_balances: bool = False


def _prefs_key(principal: str) -> str:
    return f"{WALLET_PREFS_KEY_PREFIX}{principal}"


def get_wallet_preferences(*, r: redis.Redis, principal: str) -> WalletPreferences:
    """Load saved preferences; defaults when nothing is stored or redis is unreachable."""

    try:
        raw = r.get(_prefs_key(principal))
    except redis.RedisError as e:
        logger.warning("Could not load wallet preferences: %s", e)
        return WalletPreferences()
    if not raw:
        return WalletPreferences()
    try:
        return WalletPreferences.model_validate_json(raw)
    except ValidationError:
        logger.warning("Ignoring unreadable wallet preferences for %s", principal)
        return WalletPreferences()


def save_wallet_preferences(*, r: redis.Redis, principal: str, prefs: WalletPreferences) -> None:
    r.set(_prefs_key(principal), prefs.model_dump_json())
