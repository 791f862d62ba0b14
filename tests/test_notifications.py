"""Recent-post digests."""

from datetime import timedelta

from fastapi import BackgroundTasks

from src.core.config import settings
from src.apps.accounts.models.user import User
from src.apps.blog.mailers.post_mailer import PostMailer
from src.apps.blog.models.post import Post
from tests.conftest import RecordingMailer, auth


async def make_post(post_repository, user, title, age_hours):
    stamp = settings.get_now() - timedelta(hours=age_hours)
    return await post_repository.create(
        {
            "title": title,
            "body": "body",
            "author": user.display_name,
            "author_id": user.id,
            "created_at": stamp,
            "updated_at": stamp,
        }
    )


async def test_selects_posts_updated_after_cutoff(post_service, post_repository, users):
    fresh = await make_post(post_repository, users["alice"], "fresh", age_hours=1)
    await make_post(post_repository, users["alice"], "stale", age_hours=48)
    mailer = RecordingMailer()

    result = await post_service.notify_recent_posts(mailer)

    assert result["data"]["posts"] == [fresh.id]
    assert all(digest.post_ids == [fresh.id] for digest in mailer.sent)


async def test_one_digest_per_user_regardless_of_post_count(post_service, post_repository, users):
    for n in range(5):
        await make_post(post_repository, users["bob"], f"post {n}", age_hours=1)
    mailer = RecordingMailer()

    result = await post_service.notify_recent_posts(mailer)

    recipients = [digest.recipient for digest in mailer.sent]
    assert sorted(recipients) == sorted(user.email for user in users.values())
    assert result["data"]["recipients"] == len(users)
    assert all(len(digest.post_ids) == 5 for digest in mailer.sent)
    assert "post 0" in mailer.sent[0].body


async def test_nothing_recent_sends_nothing(post_service, post_repository, users):
    await make_post(post_repository, users["alice"], "stale", age_hours=30)
    mailer = RecordingMailer()

    result = await post_service.notify_recent_posts(mailer)

    assert mailer.sent == []
    assert result["data"]["recipients"] == 0


async def test_window_can_be_widened(post_service, post_repository, users):
    await make_post(post_repository, users["alice"], "older", age_hours=30)
    mailer = RecordingMailer()

    result = await post_service.notify_recent_posts(mailer, hours=72)

    assert len(result["data"]["posts"]) == 1
    assert len(mailer.sent) == len(users)


async def test_queued_delivery_runs_after_the_call(post_service, post_repository, users):
    await make_post(post_repository, users["alice"], "fresh", age_hours=1)
    mailer = RecordingMailer()
    background_tasks = BackgroundTasks()

    result = await post_service.notify_recent_posts(mailer, background_tasks=background_tasks)

    assert result["data"]["queued"] is True
    assert mailer.sent == []

    await background_tasks()

    assert len(mailer.sent) == len(users)


async def test_failed_digest_does_not_stop_others(post_service, post_repository, users):
    await make_post(post_repository, users["alice"], "fresh", age_hours=1)

    class FlakyMailer(RecordingMailer):
        def send(self, digest):
            if digest.recipient == "bob@example.com":
                raise ConnectionError("smtp down")
            super().send(digest)

    mailer = FlakyMailer()
    background_tasks = BackgroundTasks()
    await post_service.notify_recent_posts(mailer, background_tasks=background_tasks)

    await background_tasks()

    assert sorted(d.recipient for d in mailer.sent) == ["admin@example.com", "alice@example.com"]


async def test_digest_lists_every_post():
    user = User(id=7, first_name="Alice", last_name="Doe", email="alice@example.com")
    posts = [
        Post(id=1, title="One", body="b", author="Bob Roe", author_id=2),
        Post(id=2, title="Two", body="b", author="Ada Admin", author_id=3),
    ]

    digest = PostMailer(sender="x@blog.local").build_digest(user, posts)

    assert digest.recipient == "alice@example.com"
    assert digest.sender == "x@blog.local"
    assert digest.post_ids == [1, 2]
    assert "One by Bob Roe" in digest.body
    assert "Two by Ada Admin" in digest.body
    assert digest.subject.startswith("2 ")
    assert set(digest.model_dump()) == {"sender", "recipient", "subject", "body", "post_ids"}


async def test_notify_endpoint_queues_digests(client, mailer, post_repository, users):
    await make_post(post_repository, users["alice"], "fresh", age_hours=1)

    response = await client.post("/posts/notify-recent", headers=auth(users["admin"]))

    assert response.status_code == 202
    assert response.json()["data"]["recipients"] == len(users)
    assert len(mailer.sent) == len(users)


async def test_notify_endpoint_requires_identity(client, mailer):
    response = await client.post("/posts/notify-recent")

    assert response.status_code == 401
    assert mailer.sent == []
