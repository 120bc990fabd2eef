# ===================================
# app/schemas/user.py
# ===================================

from typing import List, Optional
from datetime import datetime
from pydantic import ConfigDict

from app.schemas.common import CamelModel, Pagination


class UserCreate(CamelModel):
    # Les règles (obligatoire, longueur, format) sont appliquées par le service
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class User(CamelModel):
    # Pas de champ password : il n'est jamais sérialisé
    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserResponse(CamelModel):
    success: bool = True
    message: str
    data: User


class UsersList(CamelModel):
    users: List[User]
    pagination: Pagination


class UsersListResponse(CamelModel):
    success: bool = True
    message: str
    data: UsersList
