# ===================================
# app/main.py
# ===================================
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import sys

from app.core.config import Settings, get_settings
from app.core.database import create_store, init_store, check_store_connection
from app.core.exceptions import NotFoundError, OperationError, ValidationError
from app.core.validation import ViolationRule
from app.repositories.document_store import DocumentStore
from app.schemas.common import envelope

# Import des routes
from app.api.v1 import users, promotions

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configuration des logs"""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _server_error(request: Request, message: str, exc: Exception) -> JSONResponse:
    """Réponse 500 ; le détail de l'erreur est masqué en production"""
    settings = request.app.state.settings
    content = envelope(message, success=False)
    content["error"] = "Something went wrong" if settings.is_production else str(exc)
    return JSONResponse(status_code=500, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Traduire les erreurs métier en enveloppe {success: false, ...}"""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content=envelope(exc.message, success=False))

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        content = envelope(exc.message, success=False)
        content["error"] = exc.detail
        content["errors"] = [v.to_dict() for v in exc.violations]
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": str(err["loc"][-1]) if err.get("loc") else None,
                "rule": ViolationRule.TYPE.value,
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        content = envelope("Validation failed", success=False)
        content["error"] = ", ".join(
            f"{e['field']}: {e['message']}" if e["field"] else e["message"] for e in errors
        )
        content["errors"] = errors
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(OperationError)
    async def operation_error_handler(request: Request, exc: OperationError):
        logger.error(f"{exc.message}: {exc.cause}", exc_info=exc.cause)
        return _server_error(request, exc.message, exc.cause)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Erreur non gérée: {exc}", exc_info=True)
        return _server_error(request, "Internal server error", exc)


def create_app(settings: Optional[Settings] = None,
               store: Optional[DocumentStore] = None) -> FastAPI:
    """Factory pour créer l'application FastAPI"""
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestionnaire de cycle de vie de l'application"""
        logger.info("🚀 Démarrage de l'application...")

        owns_store = store is None
        if owns_store:
            try:
                app.state.store = create_store(settings)
                init_store(app.state.store)
            except Exception as e:
                logger.error(f"❌ Impossible de se connecter à la base de données: {e}")
                sys.exit(1)

        logger.info("✅ Application démarrée avec succès")

        yield

        logger.info("⏹️ Arrêt de l'application...")
        if owns_store:
            app.state.store.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routes API
    app.include_router(users.router, prefix=f"{settings.api_prefix}/users", tags=["Users"])
    app.include_router(promotions.router, prefix=f"{settings.api_prefix}/promotions", tags=["Promotions"])

    # Route de santé
    @app.get("/health")
    async def health_check(request: Request):
        """Vérification de la santé de l'API"""
        db_status = "ok" if check_store_connection(request.app.state.store) else "error"

        return {
            "status": "ok" if db_status == "ok" else "error",
            "version": settings.app_version,
            "environment": settings.environment,
            "database": db_status,
        }

    # Route racine
    @app.get("/")
    async def root():
        return {
            "message": f"Bienvenue sur {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health"
        }

    register_exception_handlers(app)

    return app


# Créer l'instance de l'application
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
        log_level="info"
    )
