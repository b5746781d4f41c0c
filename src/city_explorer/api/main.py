import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from city_explorer.api.routes import router
from city_explorer.config import settings
from city_explorer.data.database import create_db_engine, create_session_factory, init_db
from city_explorer.exceptions import CityExplorerError, DatabaseConnectionError, ErrorKind
from city_explorer.logging_config import setup_logging
from city_explorer.pipeline.lookup_pipeline import Providers

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Sorry we didn't catch that, please try again"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one engine (and its pool) and one HTTP session for the process
    settings.setup()
    setup_logging(level=settings.logging.level, log_file=settings.logging.file)
    app.state.engine = None
    app.state.session_factory = None
    try:
        engine = create_db_engine()
        init_db(engine)
        app.state.engine = engine
        app.state.session_factory = create_session_factory(engine)
    except DatabaseConnectionError as e:
        # Keep booting so /health can report it; lookups answer 503
        logger.error(f"Database unavailable at startup: {e}")

    app.state.providers = Providers.from_settings()
    logger.info("Providers initialized.")

    yield

    app.state.providers.close()
    if app.state.engine is not None:
        app.state.engine.dispose()


app = FastAPI(
    title="City Explorer API",
    description="Geocodes a search and aggregates weather, restaurants and movies for it.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.exception_handler(CityExplorerError)
async def handle_city_explorer_error(request: Request, exc: CityExplorerError):
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{exc.kind.value} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind.value, "detail": exc.public_message},
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": ErrorKind.INTERNAL.value, "detail": GENERIC_ERROR_MESSAGE},
    )


@app.get("/", response_class=PlainTextResponse)
def root():
    return "server is on"


@app.get("/health")
def health_check():
    """Simple health check endpoint."""
    return {"status": "healthy", "database": getattr(app.state, "session_factory", None) is not None}


def run() -> None:
    """Console entry point: configure logging and serve the API."""
    setup_logging(level=settings.logging.level, log_file=settings.logging.file)
    uvicorn.run(
        "city_explorer.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
    )


if __name__ == "__main__":
    run()
