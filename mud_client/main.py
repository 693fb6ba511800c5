from __future__ import annotations

import logging

from fastapi import FastAPI

from mud_client.api.routes import router
from mud_client.runtime.singleton import get_session
from mud_client.runtime.startup import init_session_for_app, shutdown_session_for_app

app = FastAPI(title="mud-client", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    session = await init_session_for_app()
    session.start()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await shutdown_session_for_app()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "mud-client", "version": "0.1.0", "player": get_session().player_name}
