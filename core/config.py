import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv


load_dotenv()


def _split_csv(value: Optional[str], default: str) -> List[str]:
    raw = value if value is not None else default
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "modulux"
    portfolios_collection: str = "portfolios"
    sessions_collection: str = "sessions"
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    next_site_url: Optional[str] = None
    revalidate_secret: Optional[str] = None
    public_site_url: Optional[str] = None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Reads the environment once; call ``get_settings.cache_clear()`` after changing it."""
    return Settings(
        mongodb_uri=os.getenv("MONGODB_URI", "mongodb://localhost:27017"),
        mongodb_db=os.getenv("MONGODB_DB", "modulux"),
        portfolios_collection=os.getenv("PORTFOLIOS_COLLECTION", "portfolios"),
        sessions_collection=os.getenv("SESSIONS_COLLECTION", "sessions"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        cors_origins=_split_csv(os.getenv("CORS_ORIGINS"), "*"),
        next_site_url=os.getenv("NEXT_SITE_URL") or os.getenv("NEXT_PUBLIC_SITE_URL"),
        revalidate_secret=os.getenv("REVALIDATE_SECRET"),
        public_site_url=os.getenv("PUBLIC_SITE_URL"),
    )
