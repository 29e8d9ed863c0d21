"""Router for the Users feature: signup and lookup."""
import logging
from typing import List

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.users.dtos import UpdateUserRequest, UserDTO
from api.features.users.models import UserModel
from api.features.users.service import UserService
from api.shared.db import get_db_session
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()
logger = logging.getLogger("eventbot.users.router")


def _to_dto(user: UserModel) -> UserDTO:
    return UserDTO(user_id=user.user_id, user_name=user.user_name)


@router.post("/signup", response_model=UserDTO)
@inject
async def signup(
    request: UserDTO,
    service: UserService = Depends(Provide[DependencyContainer.services.user_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    """Register a platform user."""
    user = await service.add_user(
        UserModel(user_id=request.user_id, user_name=request.user_name),
        db_session=db_session,
    )
    return _to_dto(user)


@router.get("/user/{user_id}", response_model=UserDTO)
@inject
async def get_user(
    user_id: str,
    service: UserService = Depends(Provide[DependencyContainer.services.user_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    return _to_dto(await service.get_user(user_id, db_session=db_session))


@router.get("/userlist", response_model=List[UserDTO])
@inject
async def list_users(
    service: UserService = Depends(Provide[DependencyContainer.services.user_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    return [_to_dto(u) for u in await service.list_users(db_session=db_session)]


@router.put("/user/{user_id}", response_model=UserDTO)
@inject
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    service: UserService = Depends(Provide[DependencyContainer.services.user_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    user = await service.update_user(
        UserModel(user_id=user_id, user_name=request.user_name), db_session=db_session
    )
    return _to_dto(user)


@router.delete("/user/{user_id}", status_code=204)
@inject
async def delete_user(
    user_id: str,
    service: UserService = Depends(Provide[DependencyContainer.services.user_service]),
    db_session: AsyncSession = Depends(get_db_session),
):
    await service.delete_user(user_id, db_session=db_session)
