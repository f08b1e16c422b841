import os
import secrets
import sys
from datetime import timedelta

from pymongo import MongoClient

from core.config import get_settings
from schemas.imports import SectionType
from services.portfolio_normalization import utcnow
from services.portfolio_service import build_new_portfolio
from services.section_editing import create_section, insert_section


DEMO_SECTION_TYPES = (
    SectionType.NAVIGATION,
    SectionType.HERO,
    SectionType.ABOUT,
    SectionType.PROJECTS,
    SectionType.SKILLS,
    SectionType.CONTACT,
)


def build_demo_portfolio(user_id: str, name: str = "Demo Portfolio") -> dict:
    portfolio = build_new_portfolio(user_id, name)
    sections = []
    for section_type in DEMO_SECTION_TYPES:
        sections = insert_section(sections, create_section(section_type, len(sections)))
    portfolio.sections = sections
    return portfolio.model_dump(by_alias=True, mode="python")


def seed_session(sessions, user_id: str, token: str, days: int = 30) -> None:
    """Creates (or extends) a login session so the API can be called with `Bearer <token>`."""
    sessions.update_one(
        {"sessionToken": token},
        {"$set": {"userId": user_id, "expires": utcnow() + timedelta(days=days)}},
        upsert=True,
    )
    print(f"Seeded session for user_id={user_id}: Authorization: Bearer {token}")


def seed_portfolio_for_user_id(collection, user_id: str, name: str = "Demo Portfolio"):
    existing = collection.find_one({"userId": user_id, "name": name})
    if existing:
        print(f"Portfolio '{name}' already exists for user_id={user_id}; leaving it alone.")
        return existing["_id"]

    result = collection.insert_one(build_demo_portfolio(user_id, name))
    print(f"Seeded portfolio {result.inserted_id} for user_id={user_id}")
    return result.inserted_id


if __name__ == "__main__":
    settings = get_settings()
    client = MongoClient(settings.mongodb_uri, tz_aware=True)
    db = client[settings.mongodb_db]

    arg = sys.argv[1] if len(sys.argv) > 1 else ""
    user_id = os.getenv("SEED_USER_ID") or arg or "demo-user"
    token = os.getenv("SEED_SESSION_TOKEN") or secrets.token_urlsafe(32)

    seed_session(db[settings.sessions_collection], user_id, token)
    seed_portfolio_for_user_id(db[settings.portfolios_collection], user_id)
    client.close()
