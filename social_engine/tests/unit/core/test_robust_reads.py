import pytest

from social_engine.backend.base import QueryResult
from social_engine.core.robust_reads import FOLLOWERS, FOLLOWING, RobustReads

MISSING_COLUMN = QueryResult.failure("column comments.text does not exist", code="42703")


@pytest.fixture
def reads(backend):
    return RobustReads(backend)


class TestComments:
    @pytest.mark.asyncio
    async def test_modern_shape(self, reads, backend):
        backend.on_select("comments", QueryResult(data=[{"id": "c1", "text": "hola"}]))

        result = await reads.comments("w1")

        assert result.data == [{"id": "c1", "text": "hola"}]
        assert result.variant == "modern"
        assert backend.select_calls("comments")[0].filters == {"work_id": "w1"}

    @pytest.mark.asyncio
    async def test_falls_back_to_legacy_then_join_free(self, reads, backend):
        backend.on_select(
            "comments",
            MISSING_COLUMN,
            QueryResult.failure("Could not find a relationship", code="PGRST200"),
            QueryResult(data=[{"id": "c1"}]),
        )

        result = await reads.comments("w1")

        assert result.variant == "without-relations"
        assert result.fallback is False
        projections = [q.columns for q in backend.select_calls("comments")]
        assert "content" in projections[1]
        assert "profiles" not in projections[2]

    @pytest.mark.asyncio
    async def test_all_shapes_failing_yields_empty_list(self, reads, backend):
        backend.on_select("comments", MISSING_COLUMN)

        result = await reads.comments("w1")

        assert result.data == []
        assert result.fallback is True
        assert len(backend.select_calls("comments")) == 3


class TestCounts:
    @pytest.mark.asyncio
    async def test_likes_count_reads_exact_count(self, reads, backend):
        backend.on_select("likes", QueryResult(data=None, count=42))

        result = await reads.likes_count("w1")

        assert result.data == 42
        query = backend.select_calls("likes")[0]
        assert query.count_only is True
        assert query.filters == {"work_id": "w1"}

    @pytest.mark.asyncio
    async def test_likes_count_defaults_to_zero(self, reads, backend):
        backend.on_select("likes", QueryResult.failure("relation \"likes\" does not exist"))

        result = await reads.likes_count("w1")

        assert result.data == 0
        assert result.fallback is True

    @pytest.mark.asyncio
    async def test_followers_count_tries_legacy_column(self, reads, backend):
        backend.on_select(
            "follows",
            QueryResult.failure("column follows.followee_id does not exist"),
            QueryResult(data=None, count=5),
        )

        result = await reads.follows_count("u1", FOLLOWERS)

        assert result.data == 5
        assert result.variant == "followed_id"
        assert [q.filters for q in backend.select_calls("follows")] == [
            {"followee_id": "u1"},
            {"followed_id": "u1"},
        ]

    @pytest.mark.asyncio
    async def test_following_count(self, reads, backend):
        backend.on_select("follows", QueryResult(data=None, count=None))

        result = await reads.follows_count("u1", FOLLOWING)

        assert result.data == 0
        assert result.variant == "follower_id"

    @pytest.mark.asyncio
    async def test_unknown_direction_is_rejected(self, reads):
        with pytest.raises(ValueError):
            await reads.follows_count("u1", "friends")


class TestLookups:
    @pytest.mark.asyncio
    async def test_profile(self, reads, backend):
        backend.on_select("profiles", QueryResult(data={"id": "u1", "username": "ana"}))

        assert await reads.profile("u1") == {"id": "u1", "username": "ana"}
        assert backend.select_calls("profiles")[0].single is True

    @pytest.mark.asyncio
    async def test_missing_profile_is_none(self, reads, backend):
        backend.on_select("profiles", QueryResult.failure("JSON object requested", code="PGRST116"))

        assert await reads.profile("u1") is None

    @pytest.mark.asyncio
    async def test_check_if_liked(self, reads, backend):
        backend.on_select("likes", QueryResult(data={"work_id": "w1"}), QueryResult(data=None))

        assert await reads.check_if_liked("w1", "u1") is True
        assert await reads.check_if_liked("w1", "u1") is False
        assert backend.select_calls("likes")[0].filters == {"work_id": "w1", "user_id": "u1"}

    @pytest.mark.asyncio
    async def test_check_if_bookmarked_without_actor(self, reads, backend):
        assert await reads.check_if_bookmarked("w1", None) is False
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_check_if_bookmarked_on_error(self, reads, backend):
        backend.on_select("bookmarks", RuntimeError("offline"))

        assert await reads.check_if_bookmarked("w1", "u1") is False
