"""Post mailer."""

import logging
from typing import List, Sequence

from fastapi import BackgroundTasks
from pydantic import BaseModel, Field

from src.core.config import settings
from src.apps.accounts.models.user import User
from src.apps.blog.models.post import Post

logger = logging.getLogger(__name__)


class PostDigest(BaseModel):
    """One aggregated message to one user about a batch of posts."""

    sender: str
    recipient: str
    subject: str
    body: str
    post_ids: List[int] = Field(default_factory=list)


class PostMailer:
    """Mailer stub: builds the digest and logs it instead of sending mail.

    ``deliver_now`` runs in the caller; ``deliver_later`` queues the same
    work on FastAPI background tasks so it runs after the response is sent.
    """

    def __init__(self, sender: str = settings.MAIL_SENDER):
        self.sender = sender

    def build_digest(self, user: User, posts: Sequence[Post]) -> PostDigest:
        lines = [f"Hi {user.first_name},", "", "Recently updated posts:"]
        lines.extend(f"  - {post.title} by {post.author}" for post in posts)
        return PostDigest(
            sender=self.sender,
            recipient=user.email,
            subject=f"{len(posts)} recently updated post(s)",
            body="\n".join(lines),
            post_ids=[post.id for post in posts if post.id is not None],
        )

    def send(self, digest: PostDigest) -> None:
        logger.info(
            "Mail to %s: %s (posts %s)", digest.recipient, digest.subject, digest.post_ids
        )

    def deliver_now(self, user: User, posts: Sequence[Post]) -> PostDigest:
        digest = self.build_digest(user, posts)
        self.send(digest)
        return digest

    def deliver_later(
        self, background_tasks: BackgroundTasks, user: User, posts: Sequence[Post]
    ) -> None:
        background_tasks.add_task(self._deliver_logged, user, list(posts))

    def _deliver_logged(self, user: User, posts: List[Post]) -> None:
        # Runs after the response; a failed digest is logged and must not
        # stop the digests queued for other users.
        try:
            self.deliver_now(user, posts)
        except Exception:
            logger.exception("Failed to deliver post digest to user %s", user.id)
