import pytest

from tests.conftest import START_MS, FakeClock

from uninexus_offline.services.draft_store import DraftStore
from uninexus_offline.storage import MemoryKeyValueStore


@pytest.mark.asyncio
async def test_save_overwrites_previous_draft(draft_store: DraftStore, clock: FakeClock) -> None:
    await draft_store.save_draft("post", "A")
    clock.advance(500)
    await draft_store.save_draft("post", "B", {"visibility": "public"})

    draft = await draft_store.get_draft("post")
    assert draft is not None
    assert draft.content == "B"
    assert draft.metadata == {"visibility": "public"}
    assert draft.saved_at == START_MS + 500


@pytest.mark.asyncio
async def test_drafts_are_keyed_by_type(draft_store: DraftStore) -> None:
    await draft_store.save_draft("post", "a post")
    await draft_store.save_draft("message", "a message")

    assert (await draft_store.get_draft("post")).content == "a post"
    assert (await draft_store.get_draft("message")).content == "a message"
    assert await draft_store.get_draft("comment") is None


@pytest.mark.asyncio
async def test_clear_draft(draft_store: DraftStore, kv_store: MemoryKeyValueStore) -> None:
    await draft_store.save_draft("comment", "nice")
    await draft_store.clear_draft("comment")
    await draft_store.clear_draft("comment")

    assert await draft_store.get_draft("comment") is None
    assert kv_store.snapshot() == {}


@pytest.mark.asyncio
async def test_unreadable_draft_is_absent(clock: FakeClock) -> None:
    store = MemoryKeyValueStore({"@d_post": "}{", "@d_comment": '{"content": 5}'})
    drafts = DraftStore(store, "@d_", clock=clock)

    assert await drafts.get_draft("post") is None
    assert await drafts.get_draft("comment") is None
