import re
from datetime import timedelta

import pytest
from bson import ObjectId
from fastapi import HTTPException

from schemas.portfolio import PortfolioUpdate
from services import portfolio_service
from services.portfolio_normalization import utcnow
from conftest import OTHER_USER_ID, USER_ID


# ------------------------------
# Slugs and names
# ------------------------------

def test_generate_slug_cleans_name_and_appends_base36_stamp():
    assert portfolio_service.generate_slug("My  Portfolio!!", now_ms=35) == "my-portfolio-z"
    assert portfolio_service.generate_slug("Demo", now_ms=36) == "demo-10"


def test_generate_slug_collapses_dashes():
    slug = portfolio_service.generate_slug("A -- B")
    assert re.fullmatch(r"a-b-[0-9a-z]+", slug)


@pytest.mark.parametrize("name", [None, "", "   ", 42])
def test_clean_portfolio_name_rejects_empty(name):
    with pytest.raises(HTTPException) as excinfo:
        portfolio_service.clean_portfolio_name(name)
    assert excinfo.value.status_code == 400
    assert excinfo.value.detail["code"] == "INVALID_NAME"


# ------------------------------
# Create / fetch
# ------------------------------

@pytest.mark.asyncio
async def test_create_then_fetch_has_no_sections():
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    fetched = await portfolio_service.retrieve_portfolio(created.id, USER_ID)

    assert fetched is not None
    assert fetched.sections == []
    assert fetched.name == "Demo"
    assert fetched.status == "draft"
    assert fetched.version == 1
    assert fetched.slug.startswith("demo-")
    assert fetched.settings.seo.title == "Demo"
    assert fetched.createdAt == fetched.updatedAt


@pytest.mark.asyncio
async def test_list_returns_only_owned_portfolios_newest_first(portfolios):
    first = await portfolio_service.add_portfolio(USER_ID, "First")
    await portfolio_service.add_portfolio(OTHER_USER_ID, "Not mine")
    second = await portfolio_service.add_portfolio(USER_ID, "Second")
    for doc in portfolios.docs:
        if str(doc["_id"]) == first.id:
            doc["updatedAt"] = utcnow() - timedelta(days=1)

    listed = await portfolio_service.retrieve_portfolios_for_user(USER_ID)
    assert [item.id for item in listed] == [second.id, first.id]


# ------------------------------
# Ownership isolation
# ------------------------------

@pytest.mark.asyncio
async def test_wrong_owner_looks_like_missing_portfolio():
    created = await portfolio_service.add_portfolio(USER_ID, "Private")
    missing_id = str(ObjectId())

    assert await portfolio_service.retrieve_portfolio(created.id, OTHER_USER_ID) is None
    assert await portfolio_service.retrieve_portfolio(missing_id, USER_ID) is None

    update = PortfolioUpdate(name="Hijacked")
    assert await portfolio_service.update_portfolio_by_id(created.id, OTHER_USER_ID, update) is None
    assert await portfolio_service.update_portfolio_by_id(missing_id, USER_ID, update) is None

    assert await portfolio_service.remove_portfolio(created.id, OTHER_USER_ID) is False
    assert await portfolio_service.remove_portfolio(missing_id, USER_ID) is False

    assert await portfolio_service.publish_portfolio(created.id, OTHER_USER_ID) is None
    assert await portfolio_service.publish_portfolio(missing_id, USER_ID) is None

    still_there = await portfolio_service.retrieve_portfolio(created.id, USER_ID)
    assert still_there.name == "Private"
    assert still_there.status == "draft"


@pytest.mark.asyncio
async def test_malformed_id():
    assert await portfolio_service.retrieve_portfolio("not-an-id", USER_ID) is None
    assert await portfolio_service.remove_portfolio("not-an-id", USER_ID) is False
    assert await portfolio_service.publish_portfolio("not-an-id", USER_ID) is None
    with pytest.raises(HTTPException) as excinfo:
        await portfolio_service.update_portfolio_by_id("not-an-id", USER_ID, PortfolioUpdate(name="x"))
    assert excinfo.value.detail["code"] == "INVALID_ID"


# ------------------------------
# Update
# ------------------------------

@pytest.mark.asyncio
async def test_update_replaces_sections_and_stamps_updated_at():
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    update = PortfolioUpdate.model_validate(
        {
            "sections": [
                {"id": "s1", "type": "hero", "order": 0, "isVisible": True, "data": {"title": "Ada"}},
                {"id": "s2", "type": "contact", "order": 1, "isVisible": False, "data": {}},
            ],
        }
    )

    updated = await portfolio_service.update_portfolio_by_id(created.id, USER_ID, update)

    assert [section.id for section in updated.sections] == ["s1", "s2"]
    assert updated.sections[0].data.title == "Ada"
    assert updated.sections[1].isVisible is False
    assert updated.updatedAt >= created.updatedAt
    assert updated.version == 2
    assert updated.name == "Demo"


@pytest.mark.asyncio
async def test_update_ignores_protected_fields(portfolios):
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    update = PortfolioUpdate.model_validate(
        {"userId": OTHER_USER_ID, "slug": "stolen", "status": "published", "_id": str(ObjectId()), "name": "Renamed"}
    )

    updated = await portfolio_service.update_portfolio_by_id(created.id, USER_ID, update)

    assert updated.name == "Renamed"
    assert updated.userId == USER_ID
    assert updated.slug == created.slug
    assert updated.status == "draft"
    assert updated.id == created.id


@pytest.mark.asyncio
async def test_rename_keeps_slug():
    created = await portfolio_service.add_portfolio(USER_ID, "Old name")
    updated = await portfolio_service.update_portfolio_by_id(created.id, USER_ID, PortfolioUpdate(name="New name"))
    assert updated.slug == created.slug


@pytest.mark.asyncio
async def test_update_with_stale_version_conflicts():
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    await portfolio_service.update_portfolio_by_id(created.id, USER_ID, PortfolioUpdate(name="One", version=1))

    with pytest.raises(HTTPException) as excinfo:
        await portfolio_service.update_portfolio_by_id(created.id, USER_ID, PortfolioUpdate(name="Two", version=1))

    assert excinfo.value.status_code == 409
    assert excinfo.value.detail["code"] == "VERSION_CONFLICT"
    current = await portfolio_service.retrieve_portfolio(created.id, USER_ID)
    assert current.name == "One"
    assert current.version == 2


@pytest.mark.asyncio
async def test_stale_version_on_someone_elses_portfolio_is_not_found():
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    result = await portfolio_service.update_portfolio_by_id(
        created.id, OTHER_USER_ID, PortfolioUpdate(name="x", version=7)
    )
    assert result is None


# ------------------------------
# Delete / publish / duplicate / public lookup
# ------------------------------

@pytest.mark.asyncio
async def test_delete_removes_portfolio():
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    assert await portfolio_service.remove_portfolio(created.id, USER_ID) is True
    assert await portfolio_service.retrieve_portfolio(created.id, USER_ID) is None
    assert await portfolio_service.remove_portfolio(created.id, USER_ID) is False


@pytest.mark.asyncio
async def test_publish_sets_status_and_published_at():
    created = await portfolio_service.add_portfolio(USER_ID, "Demo")
    before = (await portfolio_service.retrieve_portfolio(created.id, USER_ID)).updatedAt

    published = await portfolio_service.publish_portfolio(created.id, USER_ID)

    assert published.status == "published"
    assert published.publishedAt is not None
    assert published.publishedAt >= before
    assert published.publishedAt == published.updatedAt
    assert published.version == created.version + 1


@pytest.mark.asyncio
async def test_publish_sets_deployment_url_when_configured(monkeypatch):
    from core.config import get_settings

    monkeypatch.setenv("PUBLIC_SITE_URL", "https://sites.example.com/")
    get_settings.cache_clear()
    try:
        created = await portfolio_service.add_portfolio(USER_ID, "Demo")
        published = await portfolio_service.publish_portfolio(created.id, USER_ID)
    finally:
        monkeypatch.delenv("PUBLIC_SITE_URL")
        get_settings.cache_clear()

    assert published.deploymentUrl == f"https://sites.example.com/{created.slug}"


@pytest.mark.asyncio
async def test_published_lookup_by_slug_skips_drafts():
    draft = await portfolio_service.add_portfolio(USER_ID, "Draft")
    live = await portfolio_service.add_portfolio(USER_ID, "Live")
    await portfolio_service.publish_portfolio(live.id, USER_ID)

    assert await portfolio_service.retrieve_published_portfolio_by_slug(draft.slug) is None
    found = await portfolio_service.retrieve_published_portfolio_by_slug(live.slug)
    assert found.id == live.id


@pytest.mark.asyncio
async def test_duplicate_copies_content_into_new_draft():
    created = await portfolio_service.add_portfolio(USER_ID, "Source")
    update = PortfolioUpdate.model_validate(
        {"sections": [{"id": "s1", "type": "about", "order": 0, "data": {"content": "Hi"}}]}
    )
    await portfolio_service.update_portfolio_by_id(created.id, USER_ID, update)
    await portfolio_service.publish_portfolio(created.id, USER_ID)

    copy = await portfolio_service.duplicate_portfolio(created.id, USER_ID, "Copy")

    assert copy.id != created.id
    assert copy.slug != created.slug
    assert copy.name == "Copy"
    assert copy.status == "draft"
    assert copy.publishedAt is None
    assert copy.sections[0].data.content == "Hi"
    assert await portfolio_service.duplicate_portfolio(created.id, OTHER_USER_ID, "Copy") is None


@pytest.mark.asyncio
async def test_stored_legacy_document_is_normalized_on_read(portfolios):
    legacy_id = ObjectId()
    portfolios.docs.append(
        {
            "_id": legacy_id,
            "userId": USER_ID,
            "name": "Legacy",
            "slug": "legacy-1",
            "createdAt": "2024-01-02T03:04:05Z",
            "updatedAt": "2024-01-02T03:04:05Z",
            "sections": [
                {"id": "b", "type": "about", "order": 4, "data": {}},
                {"id": "a", "type": "hero", "order": 2, "data": {}},
            ],
        }
    )

    fetched = await portfolio_service.retrieve_portfolio(str(legacy_id), USER_ID)

    assert [section.id for section in fetched.sections] == ["a", "b"]
    assert [section.order for section in fetched.sections] == [0, 1]
    assert fetched.createdAt.tzinfo is not None
    stored = portfolios.docs[0]
    assert stored["version"] == 1
    assert stored["sections"][0]["order"] == 0
