"""
Bookmark tree helpers used when merging imported bookmarks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from bookmark_profiles.profiles.user_profile import generate_random_id

BookmarkNode = Dict[str, Any]


def iter_nodes(nodes: Iterable[BookmarkNode]) -> Iterator[BookmarkNode]:
    """Depth-first walk over a bookmark forest."""
    for node in nodes:
        yield node
        yield from iter_nodes(node.get("children") or [])


def find_bookmark_by_key(nodes: Iterable[BookmarkNode], value: Any, key: str = "id") -> Optional[BookmarkNode]:
    for node in iter_nodes(nodes):
        if node.get(key) == value:
            return node
    return None


def collect_ids(nodes: Iterable[BookmarkNode]) -> Set[str]:
    return {str(node.get("id")) for node in iter_nodes(nodes)}


def next_max_index(siblings: List[BookmarkNode]) -> int:
    """One past the highest `index` among siblings; 0 for an empty list."""
    indexes = [node.get("index", 0) for node in siblings if isinstance(node.get("index", 0), int)]
    return max(indexes) + 1 if indexes else 0


def rekey_tree(
    root: BookmarkNode,
    parent_id: str,
    taken: Set[str],
    timestamp: int,
    id_length: int = 12,
) -> BookmarkNode:
    """
    Give a subtree fresh ids and parent links in place.

    Child nodes keep their position under the same (re-keyed) parent. New
    ids are unique against `taken`, which is updated with every id issued.
    Only the subtree root is stamped with `timestamp`; descendants keep their
    dates and get the stamp only where a date is missing.

    Args:
        root: Subtree root to re-key
        parent_id: Id of the node the subtree will be attached to
        taken: Ids already used in the destination tree
        timestamp: Epoch milliseconds for dateAdded/dateGroupModified
        id_length: Length of generated ids
    """

    def _fresh_id() -> str:
        while True:
            candidate = generate_random_id(id_length, include_uppercase=True)
            if candidate not in taken:
                taken.add(candidate)
                return candidate

    stack = [(root, parent_id)]
    while stack:
        node, parent = stack.pop()
        node["id"] = _fresh_id()
        node["parentId"] = parent
        if node is root:
            node["dateAdded"] = timestamp
            node["dateGroupModified"] = timestamp
        else:
            node.setdefault("dateAdded", timestamp)
            node.setdefault("dateGroupModified", timestamp)
        for child in node.get("children") or []:
            stack.append((child, node["id"]))
    return root


def import_title(timestamp_creation: str, prefix: str = "Import", time_format: str = "%m/%d/%Y, %I:%M:%S %p") -> str:
    """
    Human-readable title for the folder receiving imported bookmarks.

    Falls back to the current time when the export timestamp cannot be read.
    """
    moment: datetime | None = None
    try:
        if timestamp_creation.lstrip("-").isdigit():
            moment = datetime.fromtimestamp(int(timestamp_creation) / 1000, tz=timezone.utc)
        else:
            moment = datetime.fromisoformat(timestamp_creation.replace("Z", "+00:00"))
    except (ValueError, OverflowError, OSError):
        moment = None
    if moment is None:
        moment = datetime.now(timezone.utc)
    return f"{prefix} {moment.strftime(time_format)}".strip()
