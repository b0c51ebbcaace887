"""
Progress schemas for CoursePath.

The completion record is persisted as a JSON array of chapter ids under a
single storage key, e.g. ["ch01", "ch07", "ch12"].
"""

import json
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from coursepath.errors import CorruptPersistedState


class CompletionRecord(BaseModel):
    """Set of chapter ids the user has marked complete."""
    model_config = ConfigDict(frozen=True)

    chapter_ids: frozenset[str] = frozenset()

    @classmethod
    def of(cls, chapter_ids: Iterable[str]) -> "CompletionRecord":
        return cls(chapter_ids=frozenset(chapter_ids))

    def __contains__(self, chapter_id: object) -> bool:
        return chapter_id in self.chapter_ids

    def sorted_ids(self) -> list[str]:
        return sorted(self.chapter_ids)

    def toggled(self, chapter_id: str) -> "CompletionRecord":
        """Return a new record with chapter_id's membership flipped."""
        if chapter_id in self.chapter_ids:
            return CompletionRecord(chapter_ids=self.chapter_ids - {chapter_id})
        return CompletionRecord(chapter_ids=self.chapter_ids | {chapter_id})

    def to_json(self) -> str:
        """Serialize as a JSON array, sorted for stable output."""
        return json.dumps(self.sorted_ids())

    @classmethod
    def from_json(cls, raw: Optional[str]) -> "CompletionRecord":
        """
        Decode a stored value.

        Args:
            raw: Stored string, or None when the key is absent

        Returns:
            The decoded record (empty when raw is None)

        Raises:
            CorruptPersistedState: If raw is not a JSON array of strings
        """
        if raw is None:
            return cls()
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise CorruptPersistedState(f"Completion record is not valid JSON: {e}") from e
        if not isinstance(value, list):
            raise CorruptPersistedState(
                f"Completion record must be a JSON array, got {type(value).__name__}"
            )
        if not all(isinstance(item, str) for item in value):
            raise CorruptPersistedState("Completion record must only contain strings")
        return cls(chapter_ids=frozenset(value))
