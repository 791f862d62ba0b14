"""User model."""

from sqlmodel import Field
from src.core.database import BaseModel


class User(BaseModel, table=True):
    """User model class.

    Owned by the authentication layer; the blog only reads it to resolve the
    caller, to label authored posts and to address notifications.
    """

    __tablename__ = "users"  # type: ignore
    first_name: str = Field()
    last_name: str = Field()
    email: str = Field(index=True, unique=True)
    is_admin: bool = Field(default=False)

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
