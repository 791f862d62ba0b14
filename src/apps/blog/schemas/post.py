"""Post schemas."""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class PostCreate(BaseModel):
    """Schema for creating a post. The author always comes from the caller."""

    model_config = ConfigDict(extra="forbid")

    title: NonEmptyStr
    body: NonEmptyStr


class PostUpdate(BaseModel):
    """Schema for updating a post. Author and publication state are not editable here."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[NonEmptyStr] = None
    body: Optional[NonEmptyStr] = None


class PostBulkItem(PostUpdate):
    """One entry of a bulk edit."""

    id: int


class PostBulkUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    posts: List[PostBulkItem] = Field(min_length=1)
