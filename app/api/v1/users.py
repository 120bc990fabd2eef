# ===================================
# app/api/v1/users.py
# ===================================
from typing import Any
from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_app_settings, get_user_service
from app.core.config import Settings
from app.core.exceptions import operation
from app.models.user import SORTABLE_FIELDS
from app.repositories.query_builder import build_list_query, pagination_meta
from app.schemas.common import ERROR_RESPONSES, MessageResponse, envelope
from app.schemas.user import (
    User,
    UserCreate,
    UserUpdate,
    UserResponse,
    UsersListResponse,
)
from app.services.user_service import UserService

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("", response_model=UsersListResponse, include_in_schema=False)
@router.get("/", response_model=UsersListResponse)
def list_users(
    page: int = Query(1, description="Numéro de page"),
    limit: int = Query(10, description="Nombre d'éléments par page"),
    sort_by: str = Query("createdAt", alias="sortBy", description="Champ de tri"),
    sort_order: str = Query("desc", alias="sortOrder", description="Ordre: asc, desc"),
    service: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
) -> Any:
    """
    Récupérer la liste des utilisateurs avec pagination
    """
    query = build_list_query(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        sortable=SORTABLE_FIELDS,
        max_limit=settings.max_page_size,
    )
    with operation("Failed to retrieve users"):
        users, total = service.list_users(query)

    return UsersListResponse(
        message="Users retrieved successfully",
        data={
            "users": [User.model_validate(user) for user in users],
            "pagination": pagination_meta(query.page, query.limit, total),
        },
    )


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> Any:
    """
    Récupérer un utilisateur par son ID
    """
    with operation("Failed to retrieve user"):
        user = service.get_user(user_id)
    return UserResponse(message="User retrieved successfully", data=User.model_validate(user))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED,
             include_in_schema=False)
@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_data: UserCreate,
    service: UserService = Depends(get_user_service),
) -> Any:
    """
    Créer un nouvel utilisateur (le mot de passe n'est jamais renvoyé)
    """
    with operation("Failed to create user"):
        user = service.create_user(user_data.model_dump(by_alias=True, exclude_unset=True))
    return UserResponse(message="User created successfully", data=User.model_validate(user))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    user_update: UserUpdate,
    service: UserService = Depends(get_user_service),
) -> Any:
    """
    Mettre à jour un utilisateur (seuls les champs fournis sont modifiés)
    """
    with operation("Failed to update user"):
        user = service.update_user(
            user_id, user_update.model_dump(by_alias=True, exclude_unset=True)
        )
    return UserResponse(message="User updated successfully", data=User.model_validate(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> Any:
    """
    Supprimer un utilisateur (ses promotions ne sont pas supprimées)
    """
    with operation("Failed to delete user"):
        service.delete_user(user_id)
    return envelope("User deleted successfully")
