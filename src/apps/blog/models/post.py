"""Post model."""

from enum import Enum

from sqlmodel import Field
from src.core.database import BaseModel


class PostStatus(str, Enum):
    """Publication state; the only transition is DRAFT -> PUBLISHED."""

    DRAFT = "draft"
    PUBLISHED = "published"


class ResourceType(str, Enum):
    """Resource kinds a delete request may name."""

    POST = "post"
    COMMENT = "comment"


class Post(BaseModel, table=True):
    """Post model class."""

    __tablename__ = "blog_posts"  # type: ignore
    title: str = Field()
    body: str = Field()
    # Display name of the writer, copied from the creating user
    author: str = Field()
    author_id: int = Field(foreign_key="users.id", index=True)
    published: bool = Field(default=False, index=True)

    @property
    def status(self) -> PostStatus:
        return PostStatus.PUBLISHED if self.published else PostStatus.DRAFT
