from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mud_client.api.deps import get_session
from mud_client.api.models import CommandRequest, CommandResponse, LogResponse, RoomResponse
from mud_client.session import GameSession

router = APIRouter()


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/command", response_model=CommandResponse)
async def command_route(payload: CommandRequest, session: GameSession = Depends(get_session)) -> CommandResponse:
    lines = await session.submit(payload.text)
    return CommandResponse(lines=lines)


@router.get("/log", response_model=LogResponse)
async def log_route(
    since: int = Query(default=0, ge=0),
    session: GameSession = Depends(get_session),
) -> LogResponse:
    # Poller lines and command output share one log; clients tail it by index.
    lines = session.log.since(since)
    return LogResponse(lines=lines, next=len(session.log))


@router.get("/room", response_model=RoomResponse)
async def room_route(session: GameSession = Depends(get_session)) -> RoomResponse:
    snapshot = session.room_state.snapshot
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not loaded yet")
    return RoomResponse(room=snapshot.room, players=list(snapshot.players))
