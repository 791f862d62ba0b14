import logging
from typing import Any, Awaitable, Dict, Generic, Optional, TypeVar, Union

from pydantic import BaseModel
from sqlmodel import SQLModel

from src.core import exceptions
from src.core.bases.base_repository import BaseRepository, RepositoryError

T = TypeVar("T", bound=SQLModel)
R = TypeVar("R")

logger = logging.getLogger(__name__)


class BaseService(Generic[T]):
    """Business layer over a repository.

    Mutations run in a fixed order: input validation, existence check,
    authorization, then a single repository write. Hooks named
    ``_validate_*`` and ``_authorize_*`` are overridden by concrete services.
    Results are returned as ``{"data": ..., "message": ...}`` dicts for the
    router layer.
    """

    def __init__(self, repository: BaseRepository[T]):
        self.repository = repository

    @property
    def model_name(self) -> str:
        return self.repository.model.__name__

    async def _call(self, operation: str, awaitable: Awaitable[R]) -> R:
        """Await a repository call, turning store failures into PersistenceException."""
        try:
            return await awaitable
        except RepositoryError as e:
            logger.error("%s %s failed: %s", self.model_name, operation, e, exc_info=e)
            raise exceptions.PersistenceException(
                f"Could not {operation} {self.model_name.lower()}"
            ) from e

    async def _get_or_404(self, item_id: Any) -> T:
        item = await self._call("get", self.repository.get(item_id))
        if item is None:
            raise exceptions.NotFoundException(
                f"{self.model_name} with id {item_id} not found"
            )
        return item

    @staticmethod
    def _as_dict(data: Union[Dict[str, Any], BaseModel]) -> Dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump(exclude_unset=True)
        return dict(data)

    # ----------------- READ ----------------- #
    async def get_by_id(self, item_id: Any) -> Dict[str, Any]:
        item = await self._get_or_404(item_id)
        return {"data": item, "message": f"{self.model_name} retrieved successfully"}

    async def get_list(
        self, page: Optional[int] = None, per_page: Optional[int] = None, **filters
    ) -> Dict[str, Any]:
        result = await self._call(
            "list", self.repository.list(page=page, per_page=per_page, **filters)
        )
        result["message"] = f"{self.model_name} items retrieved successfully"
        return result

    # ----------------- WRITE ----------------- #
    async def create(
        self, obj_in: Union[Dict[str, Any], BaseModel], actor: Optional[Any] = None
    ) -> Dict[str, Any]:
        create_data = self._as_dict(obj_in)
        create_data = await self._validate_create(create_data, actor)

        item = await self._call("create", self.repository.create(create_data))
        logger.info("%s %s created", self.model_name, getattr(item, "id", None))
        return {"data": item, "message": f"{self.model_name} created successfully"}

    async def update(
        self,
        item_id: Any,
        obj_in: Union[Dict[str, Any], BaseModel],
        actor: Optional[Any] = None,
    ) -> Dict[str, Any]:
        update_data = self._as_dict(obj_in)
        if not update_data:
            raise exceptions.ValidationException("No fields provided for update")

        existing = await self._get_or_404(item_id)
        await self._authorize_update(existing, actor)
        update_data = await self._validate_update(item_id, update_data, existing)

        item = await self._call("update", self.repository.update(item_id, update_data))
        if item is None:
            # Removed between the existence check and the write
            raise exceptions.NotFoundException(
                f"{self.model_name} with id {item_id} not found"
            )
        logger.info("%s %s updated", self.model_name, item_id)
        return {"data": item, "message": f"{self.model_name} updated successfully"}

    async def delete(self, item_id: Any, actor: Optional[Any] = None) -> Dict[str, Any]:
        existing = await self._get_or_404(item_id)
        await self._authorize_delete(existing, actor)

        deleted = await self._call("delete", self.repository.delete(item_id))
        if not deleted:
            raise exceptions.NotFoundException(
                f"{self.model_name} with id {item_id} not found"
            )
        logger.info("%s %s deleted", self.model_name, item_id)
        return {"data": {"id": item_id}, "message": f"{self.model_name} deleted successfully"}

    # ----------------- HOOKS ----------------- #
    async def _validate_create(
        self, create_data: Dict[str, Any], actor: Optional[Any]
    ) -> Dict[str, Any]:
        """Validate and complete data before creation."""
        return create_data

    async def _validate_update(
        self, item_id: Any, update_data: Dict[str, Any], existing_item: T
    ) -> Dict[str, Any]:
        """Validate data before update."""
        return update_data

    async def _authorize_update(self, existing_item: T, actor: Optional[Any]) -> None:
        pass

    async def _authorize_delete(self, existing_item: T, actor: Optional[Any]) -> None:
        pass
