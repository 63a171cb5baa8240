"""
Configuration centralisée de l'application Drive Rent Hub
Organisation des routes, middleware et configuration
"""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Import des modules de configuration
from database import engine
import models

from error_handlers import AppError
from validation_middleware import (
    app_error_handler, request_validation_exception_handler,
    http_exception_handler, general_exception_handler
)

# Import des routes
import rental_request_routes
import contract_routes
import notification_routes
import legal_profile_routes

# Import des constantes
from constants import APP_NAME, APP_VERSION, APP_DESCRIPTION


class AppConfigurator:
    """
    Configurateur centralisé pour l'application FastAPI
    """

    @staticmethod
    def create_app() -> FastAPI:
        """
        Crée et configure l'application FastAPI
        """
        AppConfigurator._configure_logging()

        # Créer les tables
        models.Base.metadata.create_all(bind=engine)

        app = FastAPI(
            title=APP_NAME,
            version=APP_VERSION,
            description=APP_DESCRIPTION
        )

        AppConfigurator._configure_middlewares(app)
        AppConfigurator._configure_exception_handlers(app)
        AppConfigurator._configure_routes(app)

        @app.get("/health", tags=["health"])
        def health():
            return {"status": "ok", "version": APP_VERSION}

        return app

    @staticmethod
    def _configure_logging():
        logging.basicConfig(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s"
        )

    @staticmethod
    def _configure_middlewares(app: FastAPI):
        """
        Configure tous les middlewares
        """
        origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
            allow_headers=["*"],
        )

    @staticmethod
    def _configure_exception_handlers(app: FastAPI):
        """
        Configure tous les gestionnaires d'exceptions
        """
        app.add_exception_handler(AppError, app_error_handler)
        app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
        app.add_exception_handler(StarletteHTTPException, http_exception_handler)
        app.add_exception_handler(SQLAlchemyError, general_exception_handler)
        app.add_exception_handler(Exception, general_exception_handler)

    @staticmethod
    def _configure_routes(app: FastAPI):
        """
        Configure toutes les routes de l'application
        """
        app.include_router(rental_request_routes.router)
        app.include_router(contract_routes.router)
        app.include_router(notification_routes.router)
        app.include_router(legal_profile_routes.router)
