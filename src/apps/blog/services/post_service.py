"""Post service."""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Union

from fastapi import BackgroundTasks
from pydantic import BaseModel

from src.core import exceptions
from src.core.bases.base_service import BaseService
from src.core.config import settings
from src.core.response.schemas import ErrorDetail
from src.apps.accounts.models.user import User
from src.apps.accounts.repositories.user_repository import UserRepository
from src.apps.blog.mailers.post_mailer import PostMailer
from src.apps.blog.models.post import Post, ResourceType
from src.apps.blog.repositories.post_repository import PostRepository

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "body")


class PostService(BaseService[Post]):
    """Post service class."""

    repository: PostRepository

    def __init__(self, repository: PostRepository, user_repository: UserRepository):
        super().__init__(repository)
        self.user_repository = user_repository

    # ----------------- RULES ----------------- #
    @staticmethod
    def _require_actor(actor: Optional[User]) -> User:
        if actor is None:
            raise exceptions.UnauthorizedException("Authentication required")
        return actor

    @staticmethod
    def _is_owner(post: Post, actor: User) -> bool:
        return post.author_id == actor.id

    def _check_fields(self, data: Dict[str, Any], required: Sequence[str] = ()) -> Dict[str, Any]:
        """Reject non-editable fields and empty values; return stripped values."""
        errors: List[ErrorDetail] = []
        for name in data:
            if name not in EDITABLE_FIELDS:
                errors.append(
                    ErrorDetail(field=name, code="NOT_EDITABLE", message=f"'{name}' cannot be set")
                )

        cleaned: Dict[str, Any] = {}
        for name in EDITABLE_FIELDS:
            if name not in data and name not in required:
                continue
            value = data.get(name)
            if not isinstance(value, str) or not value.strip():
                errors.append(
                    ErrorDetail(field=name, code="REQUIRED", message=f"'{name}' must not be empty")
                )
                continue
            cleaned[name] = value.strip()

        if errors:
            raise exceptions.ValidationException(f"Invalid {self.model_name.lower()} data", errors)
        return cleaned

    async def _validate_create(self, create_data: Dict[str, Any], actor: Optional[User]) -> Dict[str, Any]:
        """Build the full row in one go; author comes from the caller only."""
        user = self._require_actor(actor)
        cleaned = self._check_fields(create_data, required=EDITABLE_FIELDS)
        return {
            **cleaned,
            "author": user.display_name,
            "author_id": user.id,
            "published": False,
        }

    async def _validate_update(
        self,
        item_id: Any,
        update_data: Dict[str, Any],
        existing_item: Post
    ) -> Dict[str, Any]:
        return self._check_fields(update_data)

    async def _authorize_update(self, existing_item: Post, actor: Optional[User]) -> None:
        user = self._require_actor(actor)
        if not self._is_owner(existing_item, user):
            raise exceptions.AuthorizationException(
                f"Only the author may edit post {existing_item.id}"
            )

    async def _authorize_delete(self, existing_item: Post, actor: Optional[User]) -> None:
        user = self._require_actor(actor)
        if not (self._is_owner(existing_item, user) or user.is_admin):
            raise exceptions.AuthorizationException(
                f"Not allowed to delete post {existing_item.id}"
            )

    async def _authorize_publish(self, existing_item: Post, actor: Optional[User]) -> None:
        user = self._require_actor(actor)
        if not (self._is_owner(existing_item, user) or user.is_admin):
            raise exceptions.AuthorizationException(
                f"Not allowed to publish post {existing_item.id}"
            )

    # ----------------- QUERIES ----------------- #
    async def get_pending(self) -> Dict[str, Any]:
        posts = await self._call("list", self.repository.find_pending())
        return {"data": posts, "message": "Pending posts retrieved successfully"}

    async def get_by_author(self, actor: Optional[User]) -> Dict[str, Any]:
        user = self._require_actor(actor)
        posts = await self._call("list", self.repository.find_by_author(user.id))  # type: ignore
        return {"data": posts, "message": "Your posts retrieved successfully"}

    # ----------------- COMMANDS ----------------- #
    async def delete(
        self,
        item_id: Any,
        actor: Optional[Any] = None,
        resource_type: ResourceType = ResourceType.POST,
    ) -> Dict[str, Any]:
        if resource_type is ResourceType.POST:
            return await super().delete(item_id, actor=actor)
        if resource_type is ResourceType.COMMENT:
            raise exceptions.ValidationException(
                "Comments cannot be deleted through the posts resource"
            )
        raise exceptions.ValidationException(f"Unsupported resource type: {resource_type}")

    async def publish(self, item_id: Any, actor: Optional[User]) -> Dict[str, Any]:
        """Move a post from draft to published; there is no way back."""
        existing = await self._get_or_404(item_id)
        await self._authorize_publish(existing, actor)
        if existing.published:
            raise exceptions.ConflictException(f"Post {item_id} is already published")

        post = await self._call("publish", self.repository.update(item_id, {"published": True}))
        if post is None:
            raise exceptions.NotFoundException(f"Post with id {item_id} not found")
        logger.info("Post %s published by user %s", item_id, getattr(actor, "id", None))
        return {"data": post, "message": "Post published successfully"}

    async def bulk_update(
        self,
        items: Sequence[Union[Dict[str, Any], BaseModel]],
        actor: Optional[User],
    ) -> Dict[str, Any]:
        """Edit several of the caller's posts in one transaction."""
        user = self._require_actor(actor)
        if not items:
            raise exceptions.ValidationException("No posts provided for update")

        changes: Dict[int, Dict[str, Any]] = {}
        for entry in items:
            data = self._as_dict(entry)
            item_id = data.pop("id", None)
            if item_id is None:
                raise exceptions.ValidationException(
                    "Every entry needs an id",
                    [ErrorDetail(field="id", code="REQUIRED", message="'id' is required")],
                )
            if item_id in changes:
                raise exceptions.ValidationException(f"Post {item_id} is listed more than once")
            if not data:
                raise exceptions.ValidationException(f"No fields provided for post {item_id}")
            changes[item_id] = self._check_fields(data)

        existing = await self._call("get", self.repository.get_by_ids(list(changes)))
        found = {post.id: post for post in existing}
        missing = [item_id for item_id in changes if item_id not in found]
        if missing:
            raise exceptions.NotFoundException(f"Posts not found: {missing}")

        foreign = [item_id for item_id, post in found.items() if not self._is_owner(post, user)]
        if foreign:
            raise exceptions.AuthorizationException(
                f"Only the author may edit posts {sorted(foreign)}"
            )

        posts = await self._call("update", self.repository.update_many(changes))
        logger.info("User %s updated posts %s", user.id, list(changes))
        return {"data": posts, "message": f"{len(posts)} posts updated successfully"}

    async def notify_recent_posts(
        self,
        mailer: PostMailer,
        background_tasks: Optional[BackgroundTasks] = None,
        hours: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Send every user one digest of the posts updated in the last ``hours``.

        Posts and users are each loaded with a single query. With
        ``background_tasks`` the digests are queued to run after the response;
        without it they are delivered before returning.
        """
        window = hours if hours is not None else settings.NOTIFY_RECENT_HOURS
        cutoff = (now or settings.get_now()) - timedelta(hours=window)

        posts = await self._call("list", self.repository.find_updated_since(cutoff))
        users: List[User] = []
        if posts:
            users = await self._call("list", self.user_repository.get_many())

        for user in users:
            if background_tasks is not None:
                mailer.deliver_later(background_tasks, user, posts)
            else:
                mailer.deliver_now(user, posts)

        logger.info(
            "Recent-post digest: %d posts since %s, %d recipients",
            len(posts), cutoff.isoformat(), len(users),
        )
        return {
            "data": {
                "cutoff": cutoff,
                "posts": [post.id for post in posts],
                "recipients": len(users),
                "queued": background_tasks is not None,
            },
            "message": "Notifications queued" if background_tasks is not None else "Notifications sent",
        }
