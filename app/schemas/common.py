# ===================================
# app/schemas/common.py
# ===================================

from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Champs en snake_case côté Python, en camelCase dans le JSON"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorDetail(BaseModel):
    field: Optional[str] = None
    rule: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: Optional[str] = None
    errors: List[ErrorDetail] = Field(default_factory=list)


# Réponses d'erreur documentées sur chaque router
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Données invalides"},
    404: {"model": ErrorResponse, "description": "Ressource introuvable"},
    500: {"model": ErrorResponse, "description": "Erreur inattendue"},
}


def envelope(message: str, data: Any = None, success: bool = True) -> dict:
    """Enveloppe uniforme {success, data?, message}"""
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    return body
