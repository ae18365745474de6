from fastapi import FastAPI

from .products import router as products_router
from .push import router as push_router
from .stock_notifications import router as stock_notifications_router


def register_routes(app: FastAPI) -> None:
    """Registra todos los routers de la API en la aplicación FastAPI."""

    app.include_router(stock_notifications_router)
    app.include_router(push_router)
    app.include_router(products_router)
