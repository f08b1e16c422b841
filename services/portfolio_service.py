# ============================================================================
# PORTFOLIO SERVICE
# ============================================================================
# The portfolio access layer. Asynchronous functions on top of the repository
# that scope every read and write by owner, generate slugs and stamp dates.
#
# A portfolio that does not exist and one owned by somebody else look the
# same from here: both come back as None / False.
# ============================================================================

import logging
import re
import time
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi import HTTPException, status
from pydantic import ValidationError

from core.config import get_settings
from repositories.portfolio import (
    create_portfolio,
    delete_portfolio,
    get_portfolio_raw,
    get_portfolios,
    portfolio_exists,
    update_portfolio_fields,
)
from schemas.imports import PortfolioStatus
from schemas.portfolio import (
    PortfolioCreate,
    PortfolioOut,
    PortfolioSettings,
    PortfolioTheme,
    PortfolioUpdate,
    SeoSettings,
)
from services.portfolio_normalization import normalize_portfolio_doc, utcnow


logger = logging.getLogger(__name__)


def _api_error(status_code: int, message: str, code: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"error": message, "code": code})


def _to_base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if value == 0:
        return "0"
    out = ""
    while value:
        value, remainder = divmod(value, 36)
        out = digits[remainder] + out
    return out


def generate_slug(name: str, now_ms: Optional[int] = None) -> str:
    """URL-safe slug from the name plus a base-36 millisecond stamp."""
    base = name.lower()
    base = re.sub(r"[^a-z0-9\s-]", "", base)
    base = re.sub(r"\s+", "-", base)
    base = re.sub(r"-+", "-", base).strip()
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{base}-{_to_base36(stamp)}"


def clean_portfolio_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise _api_error(status.HTTP_400_BAD_REQUEST, "Portfolio name is required", "INVALID_NAME")
    return name.strip()


def _owner_filter(portfolio_id: str, user_id: str) -> Dict[str, Any]:
    return {"_id": ObjectId(portfolio_id), "userId": user_id}


async def _build_out(doc: Dict[str, Any], filter_dict: Dict[str, Any]) -> PortfolioOut:
    updates = normalize_portfolio_doc(doc)
    if updates:
        logger.info("Normalizing stored portfolio %s: %s", doc.get("_id"), sorted(updates))
        refreshed = await update_portfolio_fields(filter_dict, updates, bump_version=False)
        if refreshed:
            doc = refreshed
    try:
        return PortfolioOut(**doc)
    except ValidationError:
        logger.exception("Stored portfolio %s failed validation", doc.get("_id"))
        raise


def build_new_portfolio(user_id: str, name: str) -> PortfolioCreate:
    now = utcnow()
    return PortfolioCreate(
        userId=user_id,
        name=name,
        slug=generate_slug(name),
        sections=[],
        theme=PortfolioTheme(),
        settings=PortfolioSettings(
            seo=SeoSettings(title=name, description=f"{name} - Professional Portfolio", keywords=[])
        ),
        status=PortfolioStatus.DRAFT,
        createdAt=now,
        updatedAt=now,
        version=1,
    )


async def add_portfolio(user_id: str, name: Any) -> PortfolioOut:
    """Creates an empty draft portfolio owned by `user_id`.

    Raises:
        HTTPException 400: empty or missing name
    """
    clean_name = clean_portfolio_name(name)
    new_data = build_new_portfolio(user_id, clean_name)
    created = await create_portfolio(new_data.model_dump(by_alias=True, mode="python"))
    logger.info("Created portfolio %s for user %s", created["_id"], user_id)
    return PortfolioOut(**created)


async def retrieve_portfolio(portfolio_id: str, user_id: str) -> Optional[PortfolioOut]:
    """Retrieves a portfolio by id if `user_id` owns it, else None."""
    if not ObjectId.is_valid(portfolio_id):
        return None
    filter_dict = _owner_filter(portfolio_id, user_id)
    result = await get_portfolio_raw(filter_dict)
    if not result:
        return None
    return await _build_out(result, filter_dict)


async def retrieve_portfolios_for_user(user_id: str, start: int = 0, stop: int = 100) -> List[PortfolioOut]:
    """Retrieves a user's portfolios, most recently updated first."""
    docs = await get_portfolios({"userId": user_id}, start=start, stop=stop)
    return [await _build_out(doc, {"_id": doc["_id"], "userId": user_id}) for doc in docs]


async def retrieve_published_portfolio_by_slug(slug: str) -> Optional[PortfolioOut]:
    filter_dict = {"slug": slug, "status": PortfolioStatus.PUBLISHED.value}
    result = await get_portfolio_raw(filter_dict)
    if not result:
        return None
    return await _build_out(result, {"_id": result["_id"]})


async def update_portfolio_by_id(
    portfolio_id: str,
    user_id: str,
    portfolio_data: PortfolioUpdate,
) -> Optional[PortfolioOut]:
    """Replaces the given fields of an owned portfolio.

    `sections`, when present, replaces the whole embedded list. `updatedAt`
    is always stamped here, whatever the client sent.

    Raises:
        HTTPException 400: invalid portfolio ID format or empty name
        HTTPException 409: `version` was sent and no longer matches
    """
    if not ObjectId.is_valid(portfolio_id):
        raise _api_error(status.HTTP_400_BAD_REQUEST, "Invalid portfolio ID format", "INVALID_ID")

    updates = portfolio_data.model_dump(exclude_unset=True, by_alias=True, mode="python")
    expected_version = updates.pop("version", None)
    if "name" in updates:
        updates["name"] = clean_portfolio_name(updates["name"])
    updates["updatedAt"] = utcnow()

    filter_dict = _owner_filter(portfolio_id, user_id)
    if expected_version is not None:
        filter_dict["version"] = expected_version

    result = await update_portfolio_fields(filter_dict, updates)
    if result:
        return PortfolioOut(**result)

    if expected_version is not None and await portfolio_exists(_owner_filter(portfolio_id, user_id)):
        logger.warning(
            "Version conflict updating portfolio %s (client had version %s)",
            portfolio_id,
            expected_version,
        )
        raise _api_error(
            status.HTTP_409_CONFLICT,
            "Portfolio was modified by another session",
            "VERSION_CONFLICT",
        )
    return None


async def remove_portfolio(portfolio_id: str, user_id: str) -> bool:
    """Deletes an owned portfolio and, with it, its embedded sections."""
    if not ObjectId.is_valid(portfolio_id):
        return False
    result = await delete_portfolio(_owner_filter(portfolio_id, user_id))
    return result.deleted_count == 1


def _deployment_url(slug: str) -> Optional[str]:
    base = get_settings().public_site_url
    if not base:
        return None
    return f"{base.rstrip('/')}/{slug}"


async def publish_portfolio(portfolio_id: str, user_id: str) -> Optional[PortfolioOut]:
    """Moves an owned portfolio to published, stamping publishedAt and updatedAt together."""
    if not ObjectId.is_valid(portfolio_id):
        return None
    filter_dict = _owner_filter(portfolio_id, user_id)
    current = await get_portfolio_raw(filter_dict)
    if not current:
        return None

    now = utcnow()
    updates: Dict[str, Any] = {
        "status": PortfolioStatus.PUBLISHED.value,
        "publishedAt": now,
        "updatedAt": now,
    }
    deployment_url = _deployment_url(current["slug"])
    if deployment_url:
        updates["deploymentUrl"] = deployment_url

    result = await update_portfolio_fields(filter_dict, updates)
    if not result:
        return None
    logger.info("Published portfolio %s as %s", portfolio_id, result.get("slug"))
    return PortfolioOut(**result)


async def duplicate_portfolio(portfolio_id: str, user_id: str, name: Any) -> Optional[PortfolioOut]:
    """Copies an owned portfolio into a new draft with its own name and slug."""
    clean_name = clean_portfolio_name(name)
    original = await retrieve_portfolio(portfolio_id, user_id)
    if not original:
        return None

    copy = build_new_portfolio(user_id, clean_name)
    copy.sections = original.sections
    copy.theme = original.theme
    copy.settings = original.settings
    copy.githubRepo = original.githubRepo
    created = await create_portfolio(copy.model_dump(by_alias=True, mode="python"))
    logger.info("Duplicated portfolio %s into %s", portfolio_id, created["_id"])
    return PortfolioOut(**created)
