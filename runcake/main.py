import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from runcake import __version__
from runcake.core.config import Settings, get_settings
from runcake.core.container import get_container
from runcake.infrastructure.database import dispose_engine, init_db, session_scope
from runcake.interfaces.http import create_api_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.logging.level.upper(), format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.logging.level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    container = get_container()
    async with session_scope() as session:
        await container.execution_service(session).resume_inflight()
    logger.info("%s %s started", container.settings.project_name, __version__)
    try:
        yield
    finally:
        await container.scheduler.shutdown()
        await dispose_engine()


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.project_name,
        description="Runs catalogued scripts on tagged EC2 instances through SSM",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get(f"{settings.api_prefix}/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
