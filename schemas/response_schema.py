from typing import List, Optional

from pydantic import BaseModel

from schemas.portfolio import PortfolioOut
from schemas.sections import SectionTypeOut


class ErrorResponse(BaseModel):
    error: str
    code: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class PortfolioResponse(SuccessResponse):
    portfolio: PortfolioOut


class PortfolioListResponse(SuccessResponse):
    portfolios: List[PortfolioOut]


class SectionTypesResponse(SuccessResponse):
    sectionTypes: List[SectionTypeOut]
