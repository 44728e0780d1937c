from __future__ import annotations

import pytest

from conftest import make_row

from timeline_service.hydrator import build_tag_map, hydrate_timeline


def seed(repo, count=30):
    for post_id in range(1, count + 1):
        repo.add_post(post_id, author_id=1, created_at=f"2026-02-{(post_id % 28) + 1:02d} 10:00:00",
                      tags=["rust", "cli"] if post_id % 2 else [])


def test_build_tag_map_groups_by_post():
    assert build_tag_map([(1, "a"), (2, "b"), (1, "c")]) == {1: ["a", "c"], 2: ["b"]}


@pytest.mark.asyncio
async def test_one_batched_query_each_regardless_of_batch_size(repo):
    seed(repo, 30)
    repo.like(5, 3)
    rows = await repo.fetch_recent_posts(30)
    repo.calls.clear()

    entries = await hydrate_timeline(repo, rows, viewer_id=5)

    assert len(entries) == 30
    assert repo.calls["fetch_tags_for_posts"] == 1
    assert repo.calls["fetch_liked_post_ids"] == 1
    liked = {item.id for item in entries if item.liked_by_me}
    assert liked == {3}


@pytest.mark.asyncio
async def test_anonymous_viewer_skips_like_query(repo):
    seed(repo, 5)
    repo.like(5, 3)
    rows = await repo.fetch_recent_posts(5)
    repo.calls.clear()

    entries = await hydrate_timeline(repo, rows, viewer_id=None)

    assert repo.calls["fetch_tags_for_posts"] == 1
    assert repo.calls["fetch_liked_post_ids"] == 0
    assert not any(item.liked_by_me for item in entries)


@pytest.mark.asyncio
async def test_empty_batch_issues_no_queries(repo):
    assert await hydrate_timeline(repo, [], viewer_id=5) == []
    assert sum(repo.calls.values()) == 0


@pytest.mark.asyncio
async def test_entries_carry_tags_and_author_snapshot(repo):
    row_with_tags = make_row(1, author_profile_languages_raw="Rust, rust, Go", author_avatar_url="https://x/a.png")
    row_without = make_row(2)
    repo.post_tags = [(1, "rust"), (1, "cli")]

    entries = await hydrate_timeline(repo, [row_with_tags, row_without], viewer_id=None)

    assert entries[0].tags == ["rust", "cli"]
    assert entries[1].tags == []
    assert entries[0].author.profile_languages == ["Rust", "Go"]
    assert entries[0].author.avatar_url == "https://x/a.png"
    assert entries[0].author.handle == "ada"
    assert entries[1].author.profile_languages == []
