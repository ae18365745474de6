from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backinstock.config import get_settings
from backinstock.infrastructure.database import engine, initialize_database
from backinstock.interfaces.api.routes import register_routes
from backinstock.logging_config import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Crea el esquema al arrancar y libera las conexiones del pool al cerrar."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Crea y configura la aplicación de avisos de reposición."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Back in stock notifications", lifespan=lifespan)

    # Autoriza peticiones desde el navegador de la tienda.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
