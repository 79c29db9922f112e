"""Tests for likes, comments and pseudo-user identities."""
import asyncio

from reelbox.services.interactions.interaction_service import ANONYMOUS_USERNAME
from reelbox.services.interactions.user_id import derive_user_id


async def test_like_toggle_round_trip(interactions):
    state = await interactions.toggle_like("v.mp4", "u1")
    assert (state.liked, state.count) == (True, 1)

    state = await interactions.toggle_like("v.mp4", "u1")
    assert (state.liked, state.count) == (False, 0)


async def test_likes_are_per_user_and_per_video(interactions):
    await interactions.toggle_like("v.mp4", "u1")
    await interactions.toggle_like("v.mp4", "u2")
    await interactions.toggle_like("w.mp4", "u1")

    assert await interactions.get_like_count("v.mp4") == 2
    assert await interactions.has_user_liked("v.mp4", "u2")
    assert not await interactions.has_user_liked("w.mp4", "u2")
    assert await interactions.get_like_count("unknown.mp4") == 0


async def test_concurrent_toggles_by_distinct_users(interactions):
    states = await asyncio.gather(*(
        interactions.toggle_like("v.mp4", f"u{i}") for i in range(20)
    ))

    assert all(s.liked for s in states)
    assert sorted(s.count for s in states) == list(range(1, 21))


async def test_concurrent_toggles_by_same_user(interactions):
    states = await asyncio.gather(*(
        interactions.toggle_like("v.mp4", "u1") for _ in range(10)
    ))

    # Each toggle sees the previous one's result
    assert sorted((s.liked, s.count) for s in states) == [(False, 0)] * 5 + [(True, 1)] * 5
    final = await interactions.get_like_state("v.mp4", "u1")
    assert (final.liked, final.count) == (False, 0)


async def test_concurrent_toggles_by_same_user_odd_count(interactions):
    await interactions.toggle_like("v.mp4", "other")
    await asyncio.gather(*(
        interactions.toggle_like("v.mp4", "u1") for _ in range(7)
    ))

    final = await interactions.get_like_state("v.mp4", "u1")
    assert (final.liked, final.count) == (True, 2)


async def test_comments_newest_first(interactions):
    c1 = await interactions.add_comment("v.mp4", "u1", "alice", "first")
    c2 = await interactions.add_comment("v.mp4", "u2", "bob", "second")

    comments = await interactions.get_comments("v.mp4")

    assert [c.id for c in comments] == [c2.id, c1.id]
    assert c2.timestamp > c1.timestamp


async def test_comment_pagination(interactions):
    for i in range(5):
        await interactions.add_comment("v.mp4", "u", None, f"comment {i}")

    page = await interactions.get_comments("v.mp4", limit=2, offset=1)

    assert [c.content for c in page] == ["comment 3", "comment 2"]
    assert await interactions.get_comment_count("v.mp4") == 5
    assert await interactions.get_comments("v.mp4", offset=10) == []


async def test_comment_defaults_and_trimming(interactions):
    comment = await interactions.add_comment("v.mp4", "u1", "   ", "  hello  ")

    assert comment.username == ANONYMOUS_USERNAME
    assert comment.content == "hello"
    assert comment.video_key == "v.mp4"
    assert comment.user_id == "u1"


def test_derive_user_id_prefers_forwarded_for():
    headers = {
        "x-forwarded-for": "203.0.113.7, 10.0.0.1",
        "x-real-ip": "10.0.0.2",
        "user-agent": "Mozilla/5.0 (X11; Linux x86_64) Gecko",
    }
    assert derive_user_id(headers, "127.0.0.1") == "203-0-113-7-Mozilla-5-0--X11--Li"


def test_derive_user_id_fallbacks():
    assert derive_user_id({"x-real-ip": "10.0.0.2"}) == "10-0-0-2-unknown"
    assert derive_user_id({}, "127.0.0.1") == "127-0-0-1-unknown"
    assert derive_user_id({}) == "unknown-unknown"


def test_derive_user_id_is_stable():
    headers = {"x-forwarded-for": "198.51.100.1", "user-agent": "curl/8.0"}
    assert derive_user_id(headers) == derive_user_id(dict(headers))
