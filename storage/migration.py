"""One-time move of locally stored favorites, notes and comments to the portal API."""

import json
import logging
from dataclasses import dataclass, field

from api import ApiError

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"
NOTES_KEY = "notes"
COMMENTS_KEY = "comments"
MIGRATED_KEY = "data_migrated"

_DATA_KEYS = (FAVORITES_KEY, NOTES_KEY, COMMENTS_KEY)


@dataclass
class MigrationResult:
    success: bool = True
    favorites_count: int = 0
    notes_count: int = 0
    comments_count: int = 0
    errors: list[str] = field(default_factory=list)


def _favorite_body(fav: dict) -> dict:
    return {
        "item_type": fav.get("type"),
        "item_id": fav.get("id"),
        "title": fav.get("title") or "",
        "description": fav.get("description") or None,
        "date": fav.get("date") or fav.get("addedAt"),
    }


def _note_body(note: dict) -> dict:
    return {
        "title": note.get("title") or None,
        "content": note.get("content"),
        "linked_item": note.get("linkedItem") or None,
    }


def _comment_body(comment: dict) -> dict:
    return {
        "event_id": comment.get("eventId"),
        "event_type": comment.get("eventType"),
        "event_title": comment.get("eventTitle"),
        "author_name": comment.get("authorName"),
        "author_role": comment.get("authorRole"),
        "content": comment.get("content"),
        "parent_id": comment.get("parentId") or None,
    }


def _load_list(store, key: str, label: str, result: MigrationResult):
    raw = store.get_item(key)
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except (TypeError, ValueError) as e:
        result.errors.append(f"Failed to parse {label}: {e}")
        return []
    if not isinstance(items, list):
        result.errors.append(f"Failed to parse {label}: expected a list")
        return []
    entries = []
    for i, item in enumerate(items):
        if isinstance(item, dict):
            entries.append(item)
        else:
            result.errors.append(f"Failed to migrate {label} entry {i}: expected an object, got {item!r}")
    return entries


def migrate_local_data(store, client) -> MigrationResult:
    """
    Post every stored favorite, note and comment to the API. Server-side
    sanitization applies, so values go as-is.

    A favorite that already exists (409) is skipped without error. Only a
    clean run marks the data migrated and clears the local copies; otherwise
    the keys stay so the user can retry.
    """
    result = MigrationResult()

    try:
        for fav in _load_list(store, FAVORITES_KEY, "favorites", result):
            try:
                client.post("/favorites", _favorite_body(fav))
                result.favorites_count += 1
            except ApiError as e:
                if e.status != 409:
                    result.errors.append(f'Failed to migrate favorite "{fav.get("title")}": {e}')

        for note in _load_list(store, NOTES_KEY, "notes", result):
            try:
                client.post("/notes", _note_body(note))
                result.notes_count += 1
            except ApiError as e:
                result.errors.append(f'Failed to migrate note "{note.get("title")}": {e}')

        for comment in _load_list(store, COMMENTS_KEY, "comments", result):
            try:
                client.post("/comments", _comment_body(comment))
                result.comments_count += 1
            except ApiError as e:
                result.errors.append(f"Failed to migrate comment: {e}")

        if not result.errors:
            store.set_item(MIGRATED_KEY, "true")
            for key in _DATA_KEYS:
                store.remove_item(key)
        else:
            result.success = False
    except Exception as e:
        logger.exception("Local data migration failed")
        result.success = False
        result.errors.append(f"Migration failed: {e}")

    return result


def is_migration_needed(store) -> bool:
    if store.get_item(MIGRATED_KEY) in ("true", "dismissed"):
        return False
    return any(store.get_item(key) for key in _DATA_KEYS)


def dismiss_migration(store) -> None:
    """User declined the migration: stop offering it without touching the data."""
    store.set_item(MIGRATED_KEY, "dismissed")
