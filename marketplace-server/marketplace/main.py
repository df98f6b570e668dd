import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace import __version__
from marketplace.api.router import create_api_router
from marketplace.core.config import get_settings
from marketplace.core.container import ApplicationContainer, get_container
from marketplace.core.logging import configure_logging
from marketplace.infrastructure.database.session import dispose_engine, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: ApplicationContainer = app.state.container
    configure_logging(container.settings)
    if app.state.manage_database:
        await init_db()
    logger.info("%s %s started", container.settings.project_name, __version__)
    yield
    # Let in-flight post-settlement effects finish before the engine goes away.
    await container.effects.drain()
    if app.state.manage_database:
        await dispose_engine()


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    settings = container.settings if container is not None else get_settings()
    app = FastAPI(
        title=settings.project_name,
        description="Collectibles marketplace order settlement service",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container or get_container()
    # Injected containers bring their own engine.
    app.state.manage_database = container is None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()


def run() -> None:
    server = get_settings().server
    uvicorn.run("marketplace.main:app", host=server.host, port=server.port, reload=server.reload)


if __name__ == "__main__":
    run()
