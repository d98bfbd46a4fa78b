from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from tasklink.api.v1.router import api_router
from tasklink.core.config import settings
from tasklink.core.logging import configure_logging
from tasklink.services.api_bridge import ApiBridge
from tasklink.services.options import OptionsStore
from tasklink.services.server_model import ServerModel
from tasklink.websockets.typeahead import typeahead_ws_router


configure_logging()


def build_server_model() -> ServerModel:
    options_store = OptionsStore(settings.options_file)
    return ServerModel(ApiBridge(options_store), options_store)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    model = getattr(app.state, "server_model", None) or build_server_model()
    app.state.server_model = model
    if settings.prime_cache_on_startup:
        model.start_priming_cache()
    try:
        yield
    finally:
        await model.stop_priming_cache()
        model.typeahead.cancel()
        await model.bridge.aclose()


app = FastAPI(
    title=settings.app_name,
    default_response_class=ORJSONResponse,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.api_prefix)
app.include_router(typeahead_ws_router, prefix=settings.ws_prefix)

Instrumentator().instrument(app).expose(app)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
