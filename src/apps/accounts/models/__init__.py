"""User models."""

from .user import User
