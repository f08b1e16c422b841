"""
Pure transformations over a portfolio's ordered section collection.

Every function takes the current collection and returns the next one; none
of them touch the database or mutate their inputs. An id that is not in the
collection makes the operation a no-op, so a drag that ends after its
section was deleted by another gesture is harmless.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from core.ids import new_element_id
from schemas.imports import SectionType
from schemas.sections import SECTION_CATALOG, Section, default_background, parse_section_type


logger = logging.getLogger(__name__)


SectionList = List[Section]


def default_section_data(section_type: Union[SectionType, str]) -> Dict[str, Any]:
    """Placeholder data a new block of this type starts with.

    Never raises: a type outside the catalog gets an empty payload carrying
    only the default background.
    """
    resolved = parse_section_type(section_type)
    if resolved is None:
        return {"background": default_background().model_dump(by_alias=True)}
    return SECTION_CATALOG[resolved].data_model().model_dump(by_alias=True)


def create_section(section_type: Union[SectionType, str], current_length: int) -> Section:
    resolved = parse_section_type(section_type)
    if resolved is None:
        raise ValueError(f"Unknown section type: {section_type!r}")
    model = SECTION_CATALOG[resolved].model
    return model(id=new_element_id(), order=current_length, isVisible=True)


def _index_of(collection: Sequence[Section], section_id: str) -> Optional[int]:
    for index, section in enumerate(collection):
        if section.id == section_id:
            return index
    return None


def _renumbered(collection: Sequence[Section]) -> SectionList:
    return [
        section if section.order == index else section.model_copy(update={"order": index})
        for index, section in enumerate(collection)
    ]


def normalize_order(collection: Sequence[Section]) -> SectionList:
    """Rewrites `order` to match each section's position."""
    return _renumbered(collection)


def insert_section(collection: Sequence[Section], section: Section) -> SectionList:
    appended = section.model_copy(update={"order": len(collection)})
    return [*collection, appended]


def reorder_sections(collection: Sequence[Section], from_id: str, to_id: str) -> SectionList:
    """Moves `from_id` to the slot `to_id` occupies, shifting the ones between."""
    if from_id == to_id:
        return list(collection)
    old_index = _index_of(collection, from_id)
    new_index = _index_of(collection, to_id)
    if old_index is None or new_index is None:
        return list(collection)

    moved = list(collection)
    moved.insert(new_index, moved.pop(old_index))
    return _renumbered(moved)


def update_section_data(
    collection: Sequence[Section],
    section_id: str,
    partial_data: Mapping[str, Any],
) -> SectionList:
    """Shallow-merges `partial_data` into one section's data.

    Keys in `partial_data` win, every other key is kept. The merged payload
    is validated against the section's data model; a value of the wrong
    shape is logged and the collection comes back unchanged.
    """
    index = _index_of(collection, section_id)
    if index is None:
        return list(collection)

    section = collection[index]
    merged = {**section.data.model_dump(by_alias=True), **dict(partial_data)}
    try:
        data = type(section.data).model_validate(merged)
    except ValidationError as exc:
        logger.warning("Rejected edit of section %s: %s", section_id, exc)
        return list(collection)

    updated = list(collection)
    updated[index] = section.model_copy(update={"data": data})
    return updated


def set_section_visibility(collection: Sequence[Section], section_id: str, visible: bool) -> SectionList:
    index = _index_of(collection, section_id)
    if index is None:
        return list(collection)
    updated = list(collection)
    updated[index] = collection[index].model_copy(update={"isVisible": bool(visible)})
    return updated


def delete_section(collection: Sequence[Section], section_id: str) -> SectionList:
    """Drops the matching section and closes the gap in `order`."""
    index = _index_of(collection, section_id)
    if index is None:
        return list(collection)
    remaining = [section for position, section in enumerate(collection) if position != index]
    return _renumbered(remaining)


def duplicate_section(collection: Sequence[Section], section_id: str) -> SectionList:
    index = _index_of(collection, section_id)
    if index is None:
        return list(collection)

    source = collection[index]
    clone = source.model_copy(
        update={
            "id": new_element_id(),
            "order": len(collection),
            "data": source.data.model_copy(deep=True),
        }
    )
    return [*collection, clone]
