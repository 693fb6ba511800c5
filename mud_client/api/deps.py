from __future__ import annotations

from mud_client.runtime.singleton import get_session as _get_session
from mud_client.session import GameSession


def get_session() -> GameSession:
    return _get_session()
