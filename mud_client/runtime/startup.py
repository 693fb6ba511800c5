from __future__ import annotations

import logging

from dotenv import load_dotenv

from mud_client.config import settings_from_env
from mud_client.infra.backend_client import HttpRemoteActor
from mud_client.infra.redis_client import create_redis
from mud_client.runtime.singleton import get_session, has_session, init_session
from mud_client.session import GameSession

logger = logging.getLogger(__name__)


async def init_session_for_app() -> GameSession:
    # Tests install their own session before the app starts.
    if has_session():
        return get_session()

    load_dotenv()
    settings = settings_from_env()
    actor = HttpRemoteActor(
        base_url=settings.backend_url,
        principal=settings.principal,
        ledger_url=settings.ledger_url,
        timeout=settings.request_timeout_seconds,
    )

    player_name = await actor.get_player_name(settings.principal)
    if player_name is None:
        logger.warning("No player name registered for %s; using the principal", settings.principal)
        player_name = settings.principal

    session = GameSession.from_settings(settings, actor=actor, r=create_redis(), player_name=player_name)
    return init_session(session)


async def shutdown_session_for_app() -> None:
    if not has_session():
        return
    session = get_session()
    await session.stop()
    if isinstance(session.actor, HttpRemoteActor):
        await session.actor.aclose()
