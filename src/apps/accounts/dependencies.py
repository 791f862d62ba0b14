"""Caller identity resolution."""

import logging
from typing import Optional

from fastapi import Security
from fastapi.security import APIKeyHeader

from src.core import exceptions
from src.core.bases.base_repository import RepositoryError
from src.core.database import get_session
from src.apps.accounts.models.user import User
from src.apps.accounts.repositories.user_repository import UserRepository

USER_ID_HEADER = "X-User-Id"

user_id_header = APIKeyHeader(name=USER_ID_HEADER, auto_error=False)

logger = logging.getLogger(__name__)


def get_user_repository() -> UserRepository:
    return UserRepository(get_session)  # type:ignore


async def get_current_user(
    user_id: Optional[str] = Security(user_id_header),
) -> User:
    """Resolve the authenticated caller from the identity header.

    Stands in for the surrounding framework's authentication; tests and
    deployments behind an auth proxy can override it through
    ``app.dependency_overrides``.
    """
    if not user_id:
        raise exceptions.UnauthorizedException("Missing caller identity")
    try:
        parsed_id = int(user_id)
    except ValueError:
        raise exceptions.UnauthorizedException("Malformed caller identity")

    try:
        user = await get_user_repository().get(parsed_id)
    except RepositoryError as e:
        logger.error("Could not resolve caller %s: %s", parsed_id, e, exc_info=e)
        raise exceptions.PersistenceException("Could not resolve caller identity") from e

    if user is None:
        raise exceptions.UnauthorizedException("Unknown caller identity")
    return user
