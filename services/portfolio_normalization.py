from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from core.ids import new_element_id
from schemas.sections import parse_section_type


logger = logging.getLogger(__name__)

DATE_FIELDS = ("createdAt", "updatedAt", "publishedAt")


def utcnow() -> datetime:
    """Current UTC time at the millisecond precision BSON dates keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def normalize_datetime(value: Any) -> Any:
    """Coerces stored date values to timezone-aware UTC datetimes.

    Accepts datetimes (naive ones are taken as UTC), epoch seconds or
    milliseconds, and ISO-8601 strings. Anything else is returned untouched so
    schema validation can reject it.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, (int, float)):
        seconds = value / 1000 if value > 10_000_000_000 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        if trimmed.endswith("Z"):
            trimmed = trimmed[:-1] + "+00:00"
        try:
            return normalize_datetime(datetime.fromisoformat(trimmed))
        except ValueError:
            return value
    return value


def normalize_section_entry(entry: Any, index: int) -> Optional[Dict[str, Any]]:
    if not isinstance(entry, dict):
        return None
    section_type = parse_section_type(entry.get("type"))
    if section_type is None:
        logger.warning("Dropping section with unknown type %r", entry.get("type"))
        return None
    data = entry.get("data")
    return {
        **entry,
        "id": entry.get("id") or new_element_id(),
        "type": section_type.value,
        "data": data if isinstance(data, dict) else {},
        "order": index,
        "isVisible": entry.get("isVisible", True) is not False,
    }


def normalize_sections(sections: Any) -> List[Dict[str, Any]]:
    """Sorts stored sections by their order field and renumbers them densely."""
    if not isinstance(sections, list):
        return []

    def _sort_key(pair):
        position, entry = pair
        order = entry.get("order") if isinstance(entry, dict) else None
        return (order if isinstance(order, int) else position, position)

    ordered = [entry for _, entry in sorted(enumerate(sections), key=_sort_key)]
    normalized: List[Dict[str, Any]] = []
    for entry in ordered:
        fixed = normalize_section_entry(entry, len(normalized))
        if fixed is not None:
            normalized.append(fixed)
    return normalized


def normalize_portfolio_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Returns the field updates that bring a stored document back to shape."""
    updates: Dict[str, Any] = {}

    for field in DATE_FIELDS:
        if field not in doc:
            continue
        fixed = normalize_datetime(doc[field])
        if fixed != doc[field]:
            updates[field] = fixed

    if not isinstance(doc.get("version"), int) or doc.get("version", 0) < 1:
        updates["version"] = 1

    for field in ("theme", "settings"):
        if field in doc and not isinstance(doc[field], dict):
            updates[field] = {}

    sections = normalize_sections(doc.get("sections"))
    if sections != doc.get("sections"):
        updates["sections"] = sections

    if doc.get("status") not in ("draft", "published"):
        updates["status"] = "published" if doc.get("publishedAt") else "draft"

    return updates
