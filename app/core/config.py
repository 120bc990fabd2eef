# ===================================
# app/core/config.py
# ===================================
"""
Configuration centralisée de l'application avec Pydantic Settings.
Gère toutes les variables d'environnement et leur validation.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration principale de l'application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Promotions API", description="Nom de l'application")
    app_version: str = Field(default="1.0.0", description="Version de l'application")
    debug: bool = Field(default=False, description="Mode debug")
    environment: str = Field(default="development", description="Environnement (dev/staging/prod)")

    # API
    api_prefix: str = Field(default="/api", description="Préfixe de l'API")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Origins autorisés pour CORS"
    )

    # Base de données (document store)
    store_backend: str = Field(default="mongo", description="Backend de stockage (mongo/memory)")
    mongodb_uri: str = Field(
        default="mongodb://localhost:27017/myapp",
        description="URL de connexion MongoDB"
    )
    mongodb_timeout_ms: int = Field(default=5000, description="Timeout de sélection du serveur (ms)")

    # Pagination
    default_page_size: int = Field(default=10, ge=1, description="Taille de page par défaut")
    max_page_size: int = Field(default=100, ge=1, description="Taille de page maximum")

    # Sécurité
    password_hash_scheme: str = Field(default="pbkdf2_sha256", description="Schéma passlib")

    # Logging
    log_level: str = Field(default="INFO", description="Niveau de log")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Valide que l'environnement est correct."""
        allowed_envs = ["development", "staging", "production", "test"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of {allowed_envs}")
        return v

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v):
        """Valide le backend de stockage."""
        allowed_backends = ["mongo", "memory"]
        if v.lower() not in allowed_backends:
            raise ValueError(f"Store backend must be one of {allowed_backends}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Valide le niveau de log."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"Log level must be one of {allowed_levels}")
        return v.upper()

    @property
    def is_production(self) -> bool:
        """Retourne True si on est en production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Retourne l'instance des settings avec cache.
    Le cache évite de recharger les variables d'environnement à chaque appel.
    """
    return Settings()


# Raccourci pour accéder aux settings
settings = get_settings()
