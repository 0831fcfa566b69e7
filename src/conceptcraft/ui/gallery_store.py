"""Gallery persistence for the Conceptcraft wizard.

The gallery is an ordered list of saved results, newest first.  Every
mutation is a whole-list read-modify-write: the in-memory list is updated and
then the complete list is written back through a :class:`GalleryStorage`.
There is no partial-update format.

Storage is pluggable.  :class:`JsonFileStorage` keeps one JSON file per key
in a directory, the server-side analogue of a browser's local storage;
:class:`MemoryStorage` is used in tests.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

GALLERY_KEY = "conceptcraft_gallery"


@dataclass
class GalleryItem:
    """A saved generation result.

    Attributes:
        id: Opaque token derived from the creation time in milliseconds.
        image_url: URL (or data URL) of the result image.
        style: Style tag used for the generation.
        aspect_ratio: Aspect ratio identifier.
        concept: Prompt text the result was generated from.
        created_at: ISO-8601 creation timestamp.
    """

    id: str
    image_url: str
    style: str
    aspect_ratio: str
    concept: str
    created_at: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> GalleryItem:
        return cls(
            id=str(data["id"]),
            image_url=data.get("image_url", ""),
            style=data.get("style", ""),
            aspect_ratio=data.get("aspect_ratio", ""),
            concept=data.get("concept", ""),
            created_at=data.get("created_at", ""),
        )


class GalleryStorage(Protocol):
    """Key-value persistence for whole gallery lists."""

    def load(self, key: str) -> list[dict]: ...

    def save(self, key: str, items: list[dict]) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage, lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def load(self, key: str) -> list[dict]:
        raw = self._data.get(key)
        if raw is None:
            return []
        return json.loads(raw)

    def save(self, key: str, items: list[dict]) -> None:
        self._data[key] = json.dumps(items)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStorage:
    """Stores each key as ``<directory>/<key>.json``.

    Loading is forgiving: a missing file, invalid JSON or a non-list payload
    all load as an empty list.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> list[dict]:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            with open(path, encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable gallery file {path}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Ignoring non-list gallery file {path}")
            return []
        return data

    def save(self, key: str, items: list[dict]) -> None:
        with open(self._path(key), "w", encoding="utf-8") as handle:
            json.dump(items, handle, indent=2)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class GalleryStore:
    """Ordered gallery list kept identical to its persisted copy.

    Args:
        storage: Persistence backend.
        key: Storage key for the list.
    """

    def __init__(self, storage: GalleryStorage, key: str = GALLERY_KEY):
        self.storage = storage
        self.key = key
        self._items: list[GalleryItem] = self._load()

    def _load(self) -> list[GalleryItem]:
        items: list[GalleryItem] = []
        for entry in self.storage.load(self.key):
            if not isinstance(entry, dict) or "id" not in entry:
                continue
            items.append(GalleryItem.from_dict(entry))
        return items

    def _persist(self, items: list[GalleryItem]) -> None:
        # Write first so a failed save leaves the in-memory list untouched.
        self.storage.save(self.key, [item.to_dict() for item in items])
        self._items = items

    @property
    def items(self) -> list[GalleryItem]:
        """Snapshot of the gallery, newest first."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: str) -> GalleryItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def append(self, item: GalleryItem) -> None:
        """Insert *item* at the front and persist the whole list."""
        self._persist([item, *self._items])
        logger.info(f"Saved gallery item {item.id} ({len(self._items)} total)")

    def remove_by_id(self, item_id: str) -> bool:
        """Remove the item with *item_id* and persist.

        Returns:
            ``True`` if an item was removed.
        """
        remaining = [item for item in self._items if item.id != item_id]
        removed = len(remaining) != len(self._items)
        self._persist(remaining)
        return removed

    def clear(self) -> None:
        """Empty the gallery and delete the persisted key."""
        self.storage.remove(self.key)
        self._items = []
        logger.info("Gallery cleared")


# ---------------------------------------------------------------------------
# Item construction.
# ---------------------------------------------------------------------------

_id_lock = threading.Lock()
_last_id_ms = 0


def _next_id_ms() -> int:
    """Millisecond clock that never repeats within the process."""
    global _last_id_ms
    with _id_lock:
        now_ms = time.time_ns() // 1_000_000
        _last_id_ms = max(now_ms, _last_id_ms + 1)
        return _last_id_ms


def new_gallery_item(image_url: str, style: str, aspect_ratio: str, concept: str) -> GalleryItem:
    """Create a gallery item stamped with a fresh id and the current time."""
    return GalleryItem(
        id=str(_next_id_ms()),
        image_url=image_url,
        style=style,
        aspect_ratio=aspect_ratio,
        concept=concept,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
