"""Main FastAPI application."""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_agent import __version__
from catalog_agent.api.endpoints import router
from catalog_agent.config import get_agent_config
from catalog_agent.utils.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_agent_config()
    logger.info(
        f"Catalog agent {__version__} starting: provider={os.getenv('LLM_PROVIDER', 'openai')}, "
        f"max_rounds={config.max_rounds}, max_history_messages={config.max_history_messages}"
    )
    yield


app = FastAPI(
    title="Catalog Agent",
    description="Conversational agents for eCommerce catalog management, with tool calling over the catalog.",
    version=__version__,
    lifespan=lifespan,
    tags_metadata=[
        {"name": "Agents", "description": "Chat with a role's agent and manage agent sessions."},
        {"name": "Health", "description": "Service health monitoring and status checks."},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("catalog_agent.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), log_level="info")
