import pytest

from social_engine.backend.base import QueryResult
from social_engine.core.formatting import AUTH_REQUIRED_MESSAGE, UNEXPECTED_ERROR_MESSAGES
from social_engine.core.social_client import (
    EMPTY_COMMENT_MESSAGE,
    RPC_ADD_COMMENT,
    RPC_GET_FEED,
    RPC_GET_STATS,
    RPC_TOGGLE_BOOKMARK,
    RPC_TOGGLE_COMMENT_LIKE,
    RPC_TOGGLE_LIKE,
    RPC_TOGGLE_REPOST,
)
from social_engine.models.dtos import ActionKind, SocialStats

ITEM_ID = "work-1"
ACTOR_ID = "user-1"

STATS_ROW = {
    "likes": 10,
    "comments": 2,
    "reposts": 1,
    "bookmarks": 4,
    "user_liked": True,
    "user_bookmarked": False,
    "user_reposted": True,
}


class TestMutations:
    @pytest.mark.asyncio
    async def test_toggle_like_success(self, client, backend):
        backend.on_rpc(RPC_TOGGLE_LIKE, QueryResult(data={"liked": True, "count": 12}))

        result = await client.toggle_like(ITEM_ID, ACTOR_ID)

        assert result.success is True
        assert result.data == {"liked": True, "count": 12}
        assert backend.rpc_calls(RPC_TOGGLE_LIKE) == [{"work_id": ITEM_ID, "user_id": ACTOR_ID}]

    @pytest.mark.asyncio
    async def test_backend_error_is_reported_once_without_retry(self, client, backend):
        backend.on_rpc(RPC_TOGGLE_BOOKMARK, QueryResult.failure("permission denied", code="42501"))

        result = await client.toggle_bookmark(ITEM_ID, ACTOR_ID)

        assert result.success is False
        assert result.error == "permission denied"
        assert len(backend.rpc_calls(RPC_TOGGLE_BOOKMARK)) == 1

    @pytest.mark.asyncio
    async def test_raised_exception_becomes_unexpected_error(self, client, backend):
        backend.on_rpc(RPC_TOGGLE_LIKE, ConnectionError("reset"))

        result = await client.toggle_like(ITEM_ID, ACTOR_ID)

        assert result.success is False
        assert result.error == UNEXPECTED_ERROR_MESSAGES[ActionKind.LIKE]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor_id", [None, "", "   "])
    async def test_missing_actor_fails_without_remote_call(self, client, backend, actor_id):
        result = await client.toggle_like(ITEM_ID, actor_id)

        assert result.success is False
        assert result.error == AUTH_REQUIRED_MESSAGE
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_repost_sends_caption(self, client, backend):
        backend.on_rpc(RPC_TOGGLE_REPOST, QueryResult(data={"reposted": True}))

        await client.toggle_repost(ITEM_ID, ACTOR_ID, "mira esto")
        await client.toggle_repost(ITEM_ID, ACTOR_ID)

        params = backend.rpc_calls(RPC_TOGGLE_REPOST)
        assert params[0]["caption"] == "mira esto"
        assert params[1]["caption"] is None

    @pytest.mark.asyncio
    async def test_add_comment_strips_text_and_threads(self, client, backend):
        backend.on_rpc(RPC_ADD_COMMENT, QueryResult(data={"count": 3}))

        result = await client.add_comment(ITEM_ID, ACTOR_ID, "  hola  ", parent_id="c-9")

        assert result.success is True
        assert backend.rpc_calls(RPC_ADD_COMMENT) == [{
            "work_id": ITEM_ID,
            "user_id": ACTOR_ID,
            "comment_text": "hola",
            "parent_id": "c-9",
        }]

    @pytest.mark.asyncio
    async def test_add_comment_rejects_blank_text(self, client, backend):
        result = await client.add_comment(ITEM_ID, ACTOR_ID, "   ")

        assert result.success is False
        assert result.error == EMPTY_COMMENT_MESSAGE
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_toggle_comment_like(self, client, backend):
        backend.on_rpc(RPC_TOGGLE_COMMENT_LIKE, QueryResult(data={"liked": True, "count": 1}))

        result = await client.toggle_comment_like("c-1", ACTOR_ID)

        assert result.success is True
        assert backend.rpc_calls(RPC_TOGGLE_COMMENT_LIKE) == [{"comment_id": "c-1", "user_id": ACTOR_ID}]


class TestStatsReads:
    @pytest.mark.asyncio
    async def test_get_stats_parses_row(self, client, backend):
        backend.on_rpc(RPC_GET_STATS, QueryResult(data=[STATS_ROW]))

        stats = await client.get_stats(ITEM_ID, ACTOR_ID)

        assert stats == SocialStats(**STATS_ROW)

    @pytest.mark.asyncio
    async def test_anonymous_stats_never_carry_user_flags(self, client, backend):
        backend.on_rpc(RPC_GET_STATS, QueryResult(data=STATS_ROW))

        stats = await client.get_stats(ITEM_ID, None)

        assert stats.likes == 10
        assert (stats.user_liked, stats.user_bookmarked, stats.user_reposted) == (False, False, False)
        assert backend.rpc_calls(RPC_GET_STATS) == [{"work_id": ITEM_ID, "user_id": None}]

    @pytest.mark.asyncio
    async def test_null_counts_become_zero(self, client, backend):
        backend.on_rpc(RPC_GET_STATS, QueryResult(data={"likes": None, "user_liked": None}))

        stats = await client.get_stats(ITEM_ID, ACTOR_ID)

        assert stats == SocialStats()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        QueryResult.failure("function does not exist"),
        QueryResult(data=[]),
        QueryResult(data={"likes": -4}),
        RuntimeError("boom"),
    ])
    async def test_unusable_reads_return_none(self, client, backend, response):
        backend.on_rpc(RPC_GET_STATS, response)

        assert await client.get_stats(ITEM_ID, ACTOR_ID) is None

    @pytest.mark.asyncio
    async def test_batch_stats_dedupes_and_omits_failures(self, client, backend):
        def answer(params):
            if params["work_id"] == "broken":
                return QueryResult.failure("boom")
            return QueryResult(data={"likes": len(params["work_id"])})

        backend.on_rpc(RPC_GET_STATS, answer)

        results = await client.get_batch_stats(["a", "bb", "a", "broken", "cccc"], ACTOR_ID)

        assert set(results) == {"a", "bb", "cccc"}
        assert results["cccc"].likes == 4
        assert len(backend.rpc_calls(RPC_GET_STATS)) == 4

    @pytest.mark.asyncio
    async def test_social_feed(self, client, backend, settings):
        backend.on_rpc(RPC_GET_FEED, QueryResult(data=[{"id": "w1"}]))

        feed = await client.get_social_feed(ACTOR_ID)

        assert feed == [{"id": "w1"}]
        assert backend.rpc_calls(RPC_GET_FEED) == [
            {"user_id": ACTOR_ID, "page_limit": settings.feed_page_size, "page_offset": 0}
        ]

    @pytest.mark.asyncio
    async def test_social_feed_falls_back_to_empty(self, client, backend):
        backend.on_rpc(RPC_GET_FEED, QueryResult.failure("timeout"))

        assert await client.get_social_feed(ACTOR_ID, limit=10, offset=20) == []
        assert await client.get_social_feed(None) == []
        assert len(backend.rpc_calls(RPC_GET_FEED)) == 1
