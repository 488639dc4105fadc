"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
      or: python -m src.main
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.context import MonitorContext, running_context
from src.om_common.errors import AppError
from src.om_common.response import error_response
from src.om_view.api.router import router as monitor_router
from src.om_view.middleware.request_log import RequestLogMiddleware

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: mount the monitor context (first poll fires immediately).
    Shutdown: stop polling, discard in-flight cycles, close the engine client."""
    context = MonitorContext(settings)
    app.state.context = context
    async with running_context(context):
        yield


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(monitor_router, prefix="/api/v1")


@app.get("/health")
async def health(request: Request) -> dict[str, str]:
    context: MonitorContext = request.app.state.context
    return {
        "status": "ok",
        "version": "0.1.0",
        "engine": await context.engine_status(),
    }


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, loop="uvloop")


if __name__ == "__main__":
    run()
