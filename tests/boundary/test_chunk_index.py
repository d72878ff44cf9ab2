"""
Test suite for the versioned ChunkIndex.

Covers generation writes, compare-and-swap activation, purge semantics and
reader consistency against a real SQLite database.

System role: Verification of chunk persistence guarantees
"""

import pytest
from sqlalchemy import func, select

from lesson_rag.boundary.db.models import LessonChunkModel
from lesson_rag.boundary.index import ChunkIndex


def pairs(*texts: str) -> list[tuple[str, list[float]]]:
    return [(text, [float(i), 1.0]) for i, text in enumerate(texts)]


async def count_rows(session_factory, lesson_id: str) -> int:
    async with session_factory() as session:
        stmt = select(func.count(LessonChunkModel.id)).where(LessonChunkModel.lesson_id == lesson_id)
        return int(await session.scalar(stmt))


class TestChunkIndexVersions:
    """Test suite for version allocation."""

    @pytest.mark.asyncio
    async def test_allocate_version_should_increase_monotonically(self, chunk_index: ChunkIndex) -> None:
        """Test each allocation returns the next version."""
        versions = [await chunk_index.allocate_version("lesson-1") for _ in range(3)]

        assert versions == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_versions_should_be_independent_per_lesson(self, chunk_index: ChunkIndex) -> None:
        """Test lessons keep separate counters."""
        await chunk_index.allocate_version("lesson-1")
        await chunk_index.allocate_version("lesson-1")

        assert await chunk_index.allocate_version("lesson-2") == 1


class TestChunkIndexReplaceAll:
    """Test suite for replace_all() and get_all()."""

    @pytest.mark.asyncio
    async def test_replace_all_should_make_chunks_visible_in_order(self, chunk_index: ChunkIndex) -> None:
        """Test an applied generation is returned ordered by chunk index."""
        version = await chunk_index.allocate_version("lesson-1")

        applied = await chunk_index.replace_all("lesson-1", version, pairs("a", "b", "c"))
        chunks = await chunk_index.get_all("lesson-1")

        assert applied is True
        assert [chunk.text for chunk in chunks] == ["a", "b", "c"]
        assert [chunk.chunk_index for chunk in chunks] == [0, 1, 2]
        assert chunks[2].embedding == [2.0, 1.0]
        assert all(chunk.lesson_id == "lesson-1" for chunk in chunks)

    @pytest.mark.asyncio
    async def test_replace_all_should_garbage_collect_previous_generation(
        self, chunk_index: ChunkIndex, session_factory
    ) -> None:
        """Test old chunks are deleted once the new generation is active."""
        v1 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", v1, pairs("old-a", "old-b", "old-c"))
        v2 = await chunk_index.allocate_version("lesson-1")

        await chunk_index.replace_all("lesson-1", v2, pairs("new-a"))

        assert [chunk.text for chunk in await chunk_index.get_all("lesson-1")] == ["new-a"]
        assert await count_rows(session_factory, "lesson-1") == 1

    @pytest.mark.asyncio
    async def test_written_generation_should_stay_invisible_until_activated(self, chunk_index: ChunkIndex) -> None:
        """Test readers keep seeing the old set while a rebuild writes."""
        v1 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", v1, pairs("old-a", "old-b"))
        v2 = await chunk_index.allocate_version("lesson-1")

        await chunk_index.write_generation("lesson-1", v2, pairs("new-a", "new-b", "new-c"))
        during = await chunk_index.get_all("lesson-1")
        await chunk_index.activate("lesson-1", v2)
        after = await chunk_index.get_all("lesson-1")

        assert [chunk.text for chunk in during] == ["old-a", "old-b"]
        assert [chunk.text for chunk in after] == ["new-a", "new-b", "new-c"]

    @pytest.mark.asyncio
    async def test_stale_version_should_be_discarded(self, chunk_index: ChunkIndex, session_factory) -> None:
        """Test a lower version finishing after a higher one is not applied."""
        v1 = await chunk_index.allocate_version("lesson-1")
        v2 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", v2, pairs("v2"))

        applied = await chunk_index.replace_all("lesson-1", v1, pairs("v1-a", "v1-b"))

        assert applied is False
        assert [chunk.text for chunk in await chunk_index.get_all("lesson-1")] == ["v2"]
        assert await count_rows(session_factory, "lesson-1") == 1

    @pytest.mark.asyncio
    async def test_activation_should_keep_newer_in_flight_generation(
        self, chunk_index: ChunkIndex, session_factory
    ) -> None:
        """Test activating v1 does not delete chunks v2 has already written."""
        v1 = await chunk_index.allocate_version("lesson-1")
        v2 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.write_generation("lesson-1", v2, pairs("v2-a", "v2-b"))

        await chunk_index.replace_all("lesson-1", v1, pairs("v1"))
        applied = await chunk_index.activate("lesson-1", v2)

        assert applied is True
        assert [chunk.text for chunk in await chunk_index.get_all("lesson-1")] == ["v2-a", "v2-b"]
        assert await count_rows(session_factory, "lesson-1") == 2

    @pytest.mark.asyncio
    async def test_empty_generation_should_index_lesson_with_no_chunks(self, chunk_index: ChunkIndex) -> None:
        """Test a lesson with no text is indexed but has no chunks."""
        version = await chunk_index.allocate_version("lesson-1")

        await chunk_index.replace_all("lesson-1", version, [])
        record = await chunk_index.get_record("lesson-1")

        assert await chunk_index.get_all("lesson-1") == []
        assert record is not None and record.active_version == version

    @pytest.mark.asyncio
    async def test_lessons_should_not_see_each_others_chunks(self, chunk_index: ChunkIndex) -> None:
        """Test get_all is scoped to one lesson."""
        await chunk_index.replace_all("lesson-1", await chunk_index.allocate_version("lesson-1"), pairs("one"))
        await chunk_index.replace_all("lesson-2", await chunk_index.allocate_version("lesson-2"), pairs("two"))

        assert [chunk.text for chunk in await chunk_index.get_all("lesson-1")] == ["one"]
        assert [chunk.text for chunk in await chunk_index.get_all("lesson-2")] == ["two"]

    @pytest.mark.asyncio
    async def test_count_active_should_count_visible_chunks(self, chunk_index: ChunkIndex) -> None:
        """Test count ignores unactivated generations."""
        v1 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", v1, pairs("a", "b"))
        v2 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.write_generation("lesson-1", v2, pairs("x", "y", "z"))

        assert await chunk_index.count_active("lesson-1") == 2


class TestChunkIndexDiscard:
    """Test suite for discard_generation()."""

    @pytest.mark.asyncio
    async def test_discard_should_drop_generation_and_record_error(
        self, chunk_index: ChunkIndex, session_factory
    ) -> None:
        """Test a failed rebuild leaves the active set and notes the error."""
        v1 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", v1, pairs("keep"))
        v2 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.write_generation("lesson-1", v2, pairs("half"))

        await chunk_index.discard_generation("lesson-1", v2, error="Embedding request failed")
        record = await chunk_index.get_record("lesson-1")

        assert [chunk.text for chunk in await chunk_index.get_all("lesson-1")] == ["keep"]
        assert await count_rows(session_factory, "lesson-1") == 1
        assert record.last_error == "Embedding request failed"
        assert record.active_version == v1

    @pytest.mark.asyncio
    async def test_successful_activation_should_clear_last_error(self, chunk_index: ChunkIndex) -> None:
        """Test last_error only reflects failures since the last success."""
        v1 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.discard_generation("lesson-1", v1, error="boom")
        v2 = await chunk_index.allocate_version("lesson-1")

        await chunk_index.replace_all("lesson-1", v2, pairs("ok"))

        assert (await chunk_index.get_record("lesson-1")).last_error is None


class TestChunkIndexDeleteAll:
    """Test suite for delete_all()."""

    @pytest.mark.asyncio
    async def test_delete_all_should_remove_every_chunk(self, chunk_index: ChunkIndex, session_factory) -> None:
        """Test purge leaves nothing to read."""
        v1 = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", v1, pairs("a", "b"))

        await chunk_index.delete_all("lesson-1")
        record = await chunk_index.get_record("lesson-1")

        assert await chunk_index.get_all("lesson-1") == []
        assert await count_rows(session_factory, "lesson-1") == 0
        assert record.active_version is None

    @pytest.mark.asyncio
    async def test_rebuild_started_before_purge_should_not_resurrect_chunks(self, chunk_index: ChunkIndex) -> None:
        """Test an in-flight rebuild finishing after purge is discarded."""
        version = await chunk_index.allocate_version("lesson-1")

        await chunk_index.delete_all("lesson-1")
        applied = await chunk_index.replace_all("lesson-1", version, pairs("late"))

        assert applied is False
        assert await chunk_index.get_all("lesson-1") == []

    @pytest.mark.asyncio
    async def test_rebuild_started_after_purge_should_apply(self, chunk_index: ChunkIndex) -> None:
        """Test republishing after a purge indexes again."""
        await chunk_index.delete_all("lesson-1")
        version = await chunk_index.allocate_version("lesson-1")

        applied = await chunk_index.replace_all("lesson-1", version, pairs("fresh"))

        assert applied is True
        assert [chunk.text for chunk in await chunk_index.get_all("lesson-1")] == ["fresh"]

    @pytest.mark.asyncio
    async def test_delete_through_version_should_spare_newer_rebuilds(self, chunk_index: ChunkIndex) -> None:
        """Test a bounded purge only voids versions up to the bound."""
        v1 = await chunk_index.allocate_version("lesson-1")
        v2 = await chunk_index.allocate_version("lesson-1")

        await chunk_index.delete_all("lesson-1", through_version=v1)

        assert await chunk_index.replace_all("lesson-1", v1, pairs("old")) is False
        assert await chunk_index.replace_all("lesson-1", v2, pairs("new")) is True

    @pytest.mark.asyncio
    async def test_unknown_lesson_should_have_no_record(self, chunk_index: ChunkIndex) -> None:
        """Test lessons never indexed report no state."""
        assert await chunk_index.get_record("missing") is None
        assert await chunk_index.get_all("missing") == []
