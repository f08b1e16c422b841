import logging

import httpx

from core.config import get_settings


logger = logging.getLogger(__name__)


async def trigger_portfolio_revalidate(slug: str) -> bool:
    """Asks the public site to rebuild the page for a freshly published portfolio."""
    settings = get_settings()
    if not settings.next_site_url or not settings.revalidate_secret:
        logger.warning("Next.js revalidate skipped: missing NEXT_SITE_URL/REVALIDATE_SECRET")
        return False

    url = f"{settings.next_site_url.rstrip('/')}/api/revalidate"
    headers = {"x-revalidate-token": settings.revalidate_secret}

    try:
        async with httpx.AsyncClient(timeout=5) as client:
            response = await client.post(url, headers=headers, json={"path": f"/{slug}"})
        if response.status_code != 200:
            logger.warning("Next.js revalidate failed for %s: %s", slug, response.status_code)
            return False
        return True
    except httpx.HTTPError:
        logger.exception("Next.js revalidate error for %s", slug)
        return False
