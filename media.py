"""
Campaign media list rules shared by the lifecycle client and the service.

A media list is ordered; order_index always equals the list position and,
when the list is non-empty, exactly one item is primary. Every operation
here returns a new list and leaves its input untouched.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


@dataclass(frozen=True)
class MediaItem:
    """One persisted campaign media entry"""
    media_url: str
    type: MediaType = MediaType.IMAGE
    is_primary: bool = False
    order_index: int = 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "mediaUrl": self.media_url,
            "type": self.type.value,
            "isPrimary": self.is_primary,
            "orderIndex": self.order_index,
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "MediaItem":
        """Build from a camelCase payload or a snake_case campaign response"""
        return cls(
            media_url=data.get("mediaUrl") or data.get("media_url") or "",
            type=MediaType(data.get("type") or MediaType.IMAGE.value),
            is_primary=bool(data.get("isPrimary", data.get("is_primary", False))),
            order_index=int(data.get("orderIndex", data.get("order_index")) or 0),
        )


def normalize_media(items: List[MediaItem]) -> List[MediaItem]:
    """Re-index densely and keep a single primary (the first flagged, else index 0)"""
    if not items:
        return []
    primary_index = next((i for i, item in enumerate(items) if item.is_primary), 0)
    return [
        replace(item, order_index=index, is_primary=(index == primary_index))
        for index, item in enumerate(items)
    ]


def append_media(items: List[MediaItem], media_url: str, media_type: MediaType = MediaType.IMAGE) -> List[MediaItem]:
    new_item = MediaItem(
        media_url=media_url,
        type=media_type,
        is_primary=len(items) == 0,
        order_index=len(items),
    )
    return normalize_media(list(items) + [new_item])


def replace_media(items: List[MediaItem], index: int, media_url: str) -> List[MediaItem]:
    """Swap the URL at index, keeping its position and primary flag"""
    if index < 0 or index >= len(items):
        raise IndexError(f"media index out of range: {index}")
    updated = list(items)
    updated[index] = replace(items[index], media_url=media_url)
    return normalize_media(updated)


def remove_media(items: List[MediaItem], index: int) -> List[MediaItem]:
    """Drop the item at index; if it was primary the new first item is promoted"""
    if index < 0 or index >= len(items):
        raise IndexError(f"media index out of range: {index}")
    removed = items[index]
    remaining = [item for i, item in enumerate(items) if i != index]
    if removed.is_primary and remaining:
        remaining = [replace(item, is_primary=(i == 0)) for i, item in enumerate(remaining)]
    return normalize_media(remaining)


def set_primary_media(items: List[MediaItem], index: int) -> List[MediaItem]:
    if index < 0 or index >= len(items):
        raise IndexError(f"media index out of range: {index}")
    return normalize_media(
        [replace(item, is_primary=(i == index)) for i, item in enumerate(items)]
    )


def primary_count(items: List[MediaItem]) -> int:
    return sum(1 for item in items if item.is_primary)
