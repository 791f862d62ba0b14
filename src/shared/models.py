"""Import every table model so SQLModel.metadata knows all tables."""

from src.apps.accounts.models import User  # noqa: F401
from src.apps.blog.models import Post  # noqa: F401
