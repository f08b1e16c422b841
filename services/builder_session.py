"""
Editing session for one open portfolio.

The session owns the in-memory section list. Each gesture computes the next
list with services.section_editing, swaps it in before anything is awaited,
then saves the whole list through the API. A failed save is logged and the
local list is kept as it is; nothing is rolled back.

Saves go out one at a time and carry the version the session last saw, so a
newer edit can never be overwritten by an older one still in flight, and an
edit made in another tab surfaces as a version conflict instead of being
silently replaced.
"""

import asyncio
import logging
from typing import Any, List, Mapping, Optional

import httpx

from schemas.portfolio import PortfolioOut
from schemas.sections import Section, SectionListAdapter, parse_section_type
from services import section_editing
from services.portfolio_api_client import PortfolioApiClient, PortfolioApiError
from services.portfolio_normalization import utcnow


logger = logging.getLogger(__name__)

CANVAS_DROP_ID = "canvas"


class BuilderSession:
    def __init__(self, portfolio_id: str, api: PortfolioApiClient):
        self.portfolio_id = portfolio_id
        self.api = api
        self.portfolio: Optional[PortfolioOut] = None
        self.sections: List[Section] = []
        self.loaded = False
        self.not_found = False
        self.selected_section_id: Optional[str] = None
        self.active_drag_type: Optional[str] = None
        self.last_error: Optional[Exception] = None
        self.has_conflict = False
        self._in_flight = 0
        self._save_lock = asyncio.Lock()

    @property
    def is_saving(self) -> bool:
        return self._in_flight > 0

    async def load(self) -> bool:
        """Fetches the portfolio; False (and `not_found`) when it is missing or not ours."""
        portfolio = await self.api.get_portfolio(self.portfolio_id)
        self.loaded = True
        if portfolio is None:
            self.not_found = True
            self.portfolio = None
            self.sections = []
            return False
        self.not_found = False
        self.portfolio = portfolio
        self.sections = section_editing.normalize_order(portfolio.sections or [])
        return True

    # ------------------------------
    # Gestures
    # ------------------------------

    async def add_section(self, section_type: Any) -> Optional[Section]:
        try:
            section = section_editing.create_section(section_type, len(self.sections))
        except ValueError:
            logger.warning("Ignoring drop of unknown section type %r", section_type)
            return None
        next_sections = section_editing.insert_section(self.sections, section)
        await self._commit(next_sections)
        return next_sections[-1]

    async def delete_section(self, section_id: str) -> None:
        if self.selected_section_id == section_id:
            self.selected_section_id = None
        await self._commit(section_editing.delete_section(self.sections, section_id))

    async def duplicate_section(self, section_id: str) -> None:
        await self._commit(section_editing.duplicate_section(self.sections, section_id))

    async def reorder_sections(self, from_id: str, to_id: str) -> None:
        await self._commit(section_editing.reorder_sections(self.sections, from_id, to_id))

    async def update_section(self, section_id: str, partial_data: Mapping[str, Any]) -> None:
        await self._commit(section_editing.update_section_data(self.sections, section_id, partial_data))

    async def set_visibility(self, section_id: str, visible: bool) -> None:
        await self._commit(section_editing.set_section_visibility(self.sections, section_id, visible))

    # ------------------------------
    # Drag and drop
    # ------------------------------

    def drag_start(self, active_id: str, payload: Optional[Mapping[str, Any]] = None) -> None:
        """Palette entries carry a type tag; existing sections do not."""
        section_type = (payload or {}).get("type")
        self.active_drag_type = section_type if parse_section_type(section_type) else None

    async def drag_end(
        self,
        active_id: str,
        over_id: Optional[str],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> None:
        section_type = (payload or {}).get("type")
        self.active_drag_type = None
        if over_id is None:
            return

        if section_type and over_id == CANVAS_DROP_ID:
            await self.add_section(section_type)
            return

        if not section_type and active_id != over_id:
            await self.reorder_sections(active_id, over_id)

    # ------------------------------
    # Persistence
    # ------------------------------

    async def _commit(self, next_sections: List[Section]) -> None:
        if next_sections == self.sections:
            return
        self.sections = next_sections
        await self._persist(next_sections)

    async def _persist(self, sections: List[Section]) -> None:
        if self.portfolio is None:
            return

        self._in_flight += 1
        try:
            async with self._save_lock:
                payload = {
                    "sections": SectionListAdapter.dump_python(sections, mode="json", by_alias=True),
                    "updatedAt": utcnow().isoformat(),
                    "version": self.portfolio.version,
                }
                self.portfolio = await self.api.update_portfolio(self.portfolio_id, payload)
                self.last_error = None
        except PortfolioApiError as exc:
            if exc.code == "VERSION_CONFLICT":
                self.has_conflict = True
            logger.exception("Error saving portfolio %s", self.portfolio_id)
            self.last_error = exc
        except httpx.HTTPError as exc:
            logger.exception("Error saving portfolio %s", self.portfolio_id)
            self.last_error = exc
        except (KeyError, ValueError) as exc:
            logger.exception("Unreadable save response for portfolio %s", self.portfolio_id)
            self.last_error = exc
        finally:
            self._in_flight -= 1
