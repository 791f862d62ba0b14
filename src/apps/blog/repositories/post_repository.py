"""Post repository."""

from datetime import datetime
from typing import List

from src.core.bases.base_repository import BaseRepository
from src.apps.blog.models.post import Post


class PostRepository(BaseRepository[Post]):
    """Post repository class; holds the post query scopes."""

    model = Post
    default_order = (Post.created_at.desc(), Post.id.desc())  # type: ignore

    async def find_pending(self) -> List[Post]:
        return await self.get_many(published=False)

    async def find_by_author(self, author_id: int) -> List[Post]:
        return await self.get_many(author_id=author_id)

    async def find_updated_since(self, cutoff: datetime) -> List[Post]:
        """Posts whose last mutation is strictly after ``cutoff``."""
        return await self.get_many(Post.updated_at > cutoff)  # type: ignore
