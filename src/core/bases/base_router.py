from typing import Any, Callable, List, Optional, Type
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from src.core.bases.base_service import BaseService
from src.core.response.handlers import (
    paginated_response,
    service_error_response,
    success_response,
)
from src.core import exceptions


class BaseRouter:
    """Base router class with automatic CRUD endpoints."""

    def __init__(
        self,
        service: BaseService,
        actor_dependency: Callable,
        tags: Optional[List[str]] = None,
        prefix: str = "",
        create_schema: Optional[Type[BaseModel]] = None,
        update_schema: Optional[Type[BaseModel]] = None,
        dependencies: Optional[List[Callable]] = None
    ):
        self.service = service
        self.tags = tags or [self.__class__.__name__.replace("Router", "")]
        self.prefix = prefix
        self.create_schema = create_schema
        self.update_schema = update_schema
        self.actor_dependency = actor_dependency

        # Create router
        self.router = APIRouter(
            prefix=self.prefix,
            tags=self.tags, #type:ignore
            dependencies=dependencies or [] #type:ignore
        )

        # Register routes
        self._register_routes()

    def _register_routes(self) -> None:
        """Register all CRUD routes."""
        self._register_list()
        self._register_create()
        self._register_get_by_id()
        self._register_update()

    def _register_get_by_id(self) -> None:
        """Register GET /{item_id} route."""
        @self.router.get(
            "/{item_id}",
            summary="Get item by ID",
            responses={
                200: {"description": "Item retrieved successfully"},
                404: {"description": "Item not found"},
                500: {"description": "Internal server error"}
            }
        )
        async def get_by_id(item_id: int):
            try:
                result = await self.service.get_by_id(item_id=item_id)
                return success_response(
                    data=result["data"],
                    message=result["message"]
                )
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_list(self) -> None:
        """Register GET / route; paging is applied only when requested."""
        @self.router.get(
            "",
            summary="List items",
            responses={
                200: {"description": "Items retrieved successfully"},
                500: {"description": "Internal server error"}
            }
        )
        async def list_items(
            page: Optional[int] = Query(None, ge=1),
            per_page: Optional[int] = Query(None, ge=1, le=100),
        ):
            try:
                result = await self.service.get_list(page=page, per_page=per_page)
                return paginated_response(
                    items=result["items"],
                    total=result["total"],
                    page=result["page"],
                    per_page=result["per_page"],
                    pages=result["pages"],
                    message=result["message"]
                )
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_create(self) -> None:
        """Register POST / route."""
        if not self.create_schema:
            return

        @self.router.post(
            "",
            status_code=status.HTTP_201_CREATED,
            summary="Create new item",
            responses={
                201: {"description": "Item created successfully"},
                400: {"description": "Validation error"},
                401: {"description": "Not authenticated"},
                500: {"description": "Internal server error"}
            }
        )
        async def create_item(
            item_data: self.create_schema,  # type: ignore
            actor: Any = Depends(self.actor_dependency),
        ):
            try:
                result = await self.service.create(item_data, actor=actor)
                return success_response(
                    data=result["data"],
                    message=result["message"],
                    status_code=status.HTTP_201_CREATED
                )
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_update(self) -> None:
        """Register PATCH /{item_id} route."""
        if not self.update_schema:
            return

        @self.router.patch(
            "/{item_id}",
            summary="Update item",
            responses={
                200: {"description": "Item updated successfully"},
                400: {"description": "Validation error"},
                403: {"description": "Not allowed to modify this item"},
                404: {"description": "Item not found"},
                500: {"description": "Internal server error"}
            }
        )
        async def update_item(
            item_id: int,
            item_data: self.update_schema,  # type: ignore
            actor: Any = Depends(self.actor_dependency),
        ):
            try:
                result = await self.service.update(item_id, item_data, actor=actor)
                return success_response(
                    data=result["data"],
                    message=result["message"]
                )
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def get_router(self) -> APIRouter:
        """Get the FastAPI router instance."""
        return self.router
