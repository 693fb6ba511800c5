from __future__ import annotations

from mud_client.session import GameSession


_SESSION: GameSession | None = None


def init_session(session: GameSession) -> GameSession:
    """Install the process-wide session.

    Safe to call multiple times; subsequent calls return the already installed instance.
    """

    global _SESSION
    if _SESSION is None:
        _SESSION = session
    return _SESSION


def reset_session_for_tests() -> None:
    """Forget the installed session so tests can provide their own."""

    global _SESSION
    _SESSION = None


def has_session() -> bool:
    return _SESSION is not None


def get_session() -> GameSession:
    if _SESSION is None:
        raise RuntimeError("Session not initialized. Call init_session() at startup.")
    return _SESSION
