"""Main FastAPI server for the live voice relay."""

from __future__ import annotations

import logging
from typing import Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse

from live_relay.config.websocket import WS_ENDPOINT_PATH
from live_relay.runtime.logging import configure_logging
from live_relay.runtime.dependencies import build_runtime_deps
from live_relay.handlers.websocket.manager import handle_websocket_connection

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def _lifespan(app: FastAPI):
    runtime_deps = build_runtime_deps()
    app.state.runtime_deps = runtime_deps
    logger.info("runtime: ready ws_path=%s", WS_ENDPOINT_PATH)
    try:
        yield
    finally:
        deps = getattr(app.state, "runtime_deps", None)
        if deps is not None:
            await deps.shutdown()


app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)


def _status() -> dict[str, Any]:
    deps = getattr(app.state, "runtime_deps", None)
    return {"status": "ok", "sessions": len(deps.sessions) if deps is not None else 0}


@app.get("/")
async def root() -> dict[str, Any]:
    return _status()


@app.get("/health")
async def health() -> dict[str, Any]:
    return _status()


@app.get("/healthz")
async def healthz() -> dict[str, Any]:
    return _status()


@app.websocket(WS_ENDPOINT_PATH)
async def websocket_endpoint(websocket: WebSocket) -> None:
    runtime_deps = getattr(app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    await handle_websocket_connection(websocket, runtime_deps)
