# ============================================================================
# PORTFOLIO REPOSITORY
# ============================================================================
# Thin async wrappers around the MongoDB `portfolios` collection. Every
# function takes a plain filter dict; owner scoping is the caller's job.
# ============================================================================

from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument

from core.config import get_settings
from core.database import get_collection


def _collection():
    return get_collection(get_settings().portfolios_collection)


async def create_portfolio(document: Dict[str, Any]) -> Dict[str, Any]:
    result = await _collection().insert_one(document)
    return {**document, "_id": result.inserted_id}


async def get_portfolio_raw(filter_dict: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return await _collection().find_one(filter_dict)


async def get_portfolios(filter_dict: Dict[str, Any], start: int = 0, stop: int = 100) -> List[Dict[str, Any]]:
    cursor = _collection().find(filter_dict).sort("updatedAt", DESCENDING).skip(start).limit(stop - start)
    return await cursor.to_list(length=stop - start)


async def portfolio_exists(filter_dict: Dict[str, Any]) -> bool:
    return await _collection().find_one(filter_dict, projection={"_id": 1}) is not None


async def update_portfolio_fields(
    filter_dict: Dict[str, Any],
    updates: Dict[str, Any],
    bump_version: bool = True,
) -> Optional[Dict[str, Any]]:
    """$set `updates` on the first matching document and return it as stored."""
    operation: Dict[str, Any] = {"$set": updates}
    if bump_version:
        operation["$inc"] = {"version": 1}
    return await _collection().find_one_and_update(
        filter_dict,
        operation,
        return_document=ReturnDocument.AFTER,
    )


async def delete_portfolio(filter_dict: Dict[str, Any]):
    return await _collection().delete_one(filter_dict)
