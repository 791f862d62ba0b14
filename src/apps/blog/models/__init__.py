"""Post models."""

from .post import Post, PostStatus, ResourceType
