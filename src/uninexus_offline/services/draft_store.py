"""One unsent draft per content type, kept across restarts."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from uninexus_offline.schemas.offline import Draft, DraftType
from uninexus_offline.storage.base import UNREADABLE, KeyValueStore, decode_json, encode_json
from uninexus_offline.utils.time import Clock, now_ms

logger = logging.getLogger(__name__)


class DraftStore:
    def __init__(self, store: KeyValueStore, prefix: str, *, clock: Clock = now_ms) -> None:
        self._store = store
        self._prefix = prefix
        self._clock = clock

    def _key(self, draft_type: DraftType) -> str:
        return f"{self._prefix}{draft_type}"

    async def save_draft(
        self,
        draft_type: DraftType,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> Draft:
        """Overwrite the draft slot for ``draft_type``."""
        draft = Draft(content=content, metadata=metadata, saved_at=self._clock())
        await self._store.set(self._key(draft_type), encode_json(draft.to_storage()))
        return draft

    async def get_draft(self, draft_type: DraftType) -> Draft | None:
        key = self._key(draft_type)
        decoded = decode_json(key, await self._store.get(key))
        if decoded is None or decoded is UNREADABLE:
            return None
        try:
            return Draft.model_validate(decoded)
        except ValidationError:
            logger.warning("Draft %s is malformed; treating it as absent", key)
            return None

    async def clear_draft(self, draft_type: DraftType) -> None:
        await self._store.remove(self._key(draft_type))
