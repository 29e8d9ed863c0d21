"""Service layer for the Users feature."""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from api.features.users.exceptions import UserAlreadyExistsError, UserNotFoundError
from api.features.users.models import UserModel
from api.features.users.repositories.user_repository import UserRepository
from api.shared.exceptions import ConflictError

logger = logging.getLogger("eventbot.users.service")


class UserService:
    """CRUD over users. Each write commits on success and rolls back on failure."""

    async def list_users(self, *, db_session: AsyncSession) -> List[UserModel]:
        repository = UserRepository(db_session)
        return [UserModel.from_entity(e) for e in await repository.list()]

    async def get_user(self, user_id: str, *, db_session: AsyncSession) -> UserModel:
        repository = UserRepository(db_session)
        entity = await repository.get_by_user_id(user_id)
        if entity is None:
            raise UserNotFoundError(user_id)
        return UserModel.from_entity(entity)

    async def add_user(self, user: UserModel, *, db_session: AsyncSession) -> UserModel:
        repository = UserRepository(db_session)
        try:
            if await repository.exists(user_id=user.user_id):
                raise UserAlreadyExistsError(user.user_id)
            entity = await repository.create(user.to_entity())
            await db_session.commit()
        except UserAlreadyExistsError:
            await db_session.rollback()
            raise
        except ConflictError as e:
            await db_session.rollback()
            raise UserAlreadyExistsError(user.user_id) from e
        except Exception:
            await db_session.rollback()
            raise

        logger.info(f"User created: {entity.user_id}")
        return UserModel.from_entity(entity)

    async def update_user(self, user: UserModel, *, db_session: AsyncSession) -> UserModel:
        repository = UserRepository(db_session)
        try:
            affected = await repository.update_by_key(
                {"user_id": user.user_id}, user_name=user.user_name
            )
            if affected == 0:
                raise UserNotFoundError(user.user_id)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        return user

    async def delete_user(self, user_id: str, *, db_session: AsyncSession) -> None:
        repository = UserRepository(db_session)
        try:
            if await repository.delete_by_key(user_id=user_id) == 0:
                raise UserNotFoundError(user_id)
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise
        logger.info(f"User deleted: {user_id}")
