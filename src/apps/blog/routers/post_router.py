"""Post router."""

from typing import Optional

from fastapi import BackgroundTasks, Depends, Query, status

from src.core import exceptions
from src.core.database import get_session
from src.core.bases.base_router import BaseRouter
from src.core.response.handlers import service_error_response, success_response
from src.apps.accounts.dependencies import get_current_user, get_user_repository
from src.apps.accounts.models.user import User
from src.apps.blog.mailers.post_mailer import PostMailer
from src.apps.blog.models.post import ResourceType
from src.apps.blog.services.post_service import PostService
from src.apps.blog.repositories.post_repository import PostRepository
from src.apps.blog.schemas.post import PostBulkUpdate, PostCreate, PostUpdate


def get_post_repository():
    """Get post repository instance."""
    return PostRepository(get_session) #type:ignore


def get_post_service():
    """Get post service instance."""
    return PostService(get_post_repository(), get_user_repository())


def get_post_mailer() -> PostMailer:
    return PostMailer()


class PostRouter(BaseRouter):
    """Post router class."""

    service: PostService

    def __init__(self):
        super().__init__(
            service=get_post_service(),
            create_schema=PostCreate,
            update_schema=PostUpdate,
            actor_dependency=get_current_user,
            prefix="/posts",
            tags=["Posts"]
        )

    def _register_routes(self) -> None:
        # Fixed paths go first so they are not captured by /{item_id}
        self._register_pending()
        self._register_mine()
        self._register_notify_recent()
        self._register_bulk_update()
        super()._register_routes()
        self._register_delete()
        self._register_publish()

    def _register_pending(self) -> None:
        @self.router.get("/pending", summary="List posts awaiting publication")
        async def list_pending():
            try:
                result = await self.service.get_pending()
                return success_response(data=result["data"], message=result["message"])
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_mine(self) -> None:
        @self.router.get("/mine", summary="List the caller's posts")
        async def list_mine(user: User = Depends(get_current_user)):
            try:
                result = await self.service.get_by_author(user)
                return success_response(data=result["data"], message=result["message"])
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_bulk_update(self) -> None:
        @self.router.patch(
            "",
            summary="Edit several of the caller's posts at once",
            responses={
                200: {"description": "Posts updated successfully"},
                400: {"description": "Validation error"},
                403: {"description": "At least one post belongs to someone else"},
                404: {"description": "At least one post not found"},
            }
        )
        async def bulk_update(
            payload: PostBulkUpdate,
            user: User = Depends(get_current_user),
        ):
            try:
                result = await self.service.bulk_update(payload.posts, user)
                return success_response(data=result["data"], message=result["message"])
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_publish(self) -> None:
        @self.router.patch(
            "/{item_id}/publish",
            summary="Publish a draft post",
            responses={
                200: {"description": "Post published"},
                403: {"description": "Not allowed to publish this post"},
                404: {"description": "Post not found"},
                409: {"description": "Post already published"},
            }
        )
        async def publish(item_id: int, user: User = Depends(get_current_user)):
            try:
                result = await self.service.publish(item_id, user)
                return success_response(data=result["data"], message=result["message"])
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_delete(self) -> None:
        @self.router.delete(
            "/{item_id}",
            summary="Delete a post",
            responses={
                200: {"description": "Post deleted successfully"},
                400: {"description": "Resource type is not a post"},
                403: {"description": "Not allowed to delete this post"},
                404: {"description": "Post not found"},
            }
        )
        async def delete_post(
            item_id: int,
            resource_type: ResourceType = Query(ResourceType.POST, alias="type"),
            user: User = Depends(get_current_user),
        ):
            try:
                result = await self.service.delete(
                    item_id, actor=user, resource_type=resource_type
                )
                return success_response(data=result["data"], message=result["message"])
            except exceptions.ServiceException as e:
                return service_error_response(e)

    def _register_notify_recent(self) -> None:
        @self.router.post(
            "/notify-recent",
            status_code=status.HTTP_202_ACCEPTED,
            summary="Queue one digest per user of recently updated posts",
        )
        async def notify_recent(
            background_tasks: BackgroundTasks,
            hours: Optional[int] = Query(None, ge=1, le=24 * 30),
            user: User = Depends(get_current_user),
            mailer: PostMailer = Depends(get_post_mailer),
        ):
            try:
                result = await self.service.notify_recent_posts(
                    mailer, background_tasks=background_tasks, hours=hours
                )
                return success_response(
                    data=result["data"],
                    message=result["message"],
                    status_code=status.HTTP_202_ACCEPTED
                )
            except exceptions.ServiceException as e:
                return service_error_response(e)


# Router instance
router = PostRouter().get_router()
