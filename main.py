import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config import Settings
from counter import Counted, increment_sequence
from database import Database, create_tables_with_retry, wait_for_database
from schemas import GENERIC_ERROR, MISSING_SEQUENCE, VisitCount

logger = logging.getLogger(__name__)


def _prepare_database(settings, database):
    # Appel des fonctions de démarrage avec retry, sans bloquer le lancement
    if not (settings.wait_for_database or settings.create_tables):
        return
    try:
        if settings.wait_for_database:
            wait_for_database(database.engine)
        if settings.create_tables:
            create_tables_with_retry(database.engine)
    except Exception as e:
        logger.error("Failed to prepare database: %s", e)


def create_app(settings=None, database=None, pause=None):
    """Build the counter app; ``uvicorn main:create_app --factory`` reads settings from the environment."""
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    if settings is None:
        settings = Settings.from_env()
    if database is None:
        database = Database(settings)

    @asynccontextmanager
    async def lifespan(app):
        _prepare_database(settings, database)
        yield
        database.dispose()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.pause = pause

    # L'hôte route toutes les requêtes vers cette fonction
    @app.api_route("/", methods=["GET", "POST"])
    @app.api_route("/{path:path}", methods=["GET", "POST"])
    def visit_count(request: Request):
        sequence_name = request.query_params.get("sequence", "")
        if not sequence_name.strip():
            return JSONResponse(VisitCount.of(-1, MISSING_SEQUENCE).body())

        result = increment_sequence(request.app.state.database, sequence_name, pause=request.app.state.pause)
        if isinstance(result, Counted):
            return JSONResponse(VisitCount.of(result.visit_count).body())
        return JSONResponse(VisitCount.of(-1, GENERIC_ERROR).body(), status_code=500)

    return app
