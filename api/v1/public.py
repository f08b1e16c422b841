from fastapi import APIRouter, HTTPException, Path, status

from schemas.response_schema import ErrorResponse, PortfolioResponse, SectionTypesResponse
from schemas.sections import section_palette
from services.portfolio_service import retrieve_published_portfolio_by_slug

router = APIRouter(tags=["Public"])


@router.get("/section-types", response_model=SectionTypesResponse)
async def list_section_types():
    """
    The block palette the builder offers, in display order.
    """
    return SectionTypesResponse(sectionTypes=section_palette())


@router.get(
    "/public/{slug}",
    response_model=PortfolioResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_published_portfolio(slug: str = Path(..., description="public slug of a published portfolio")):
    """
    Read-only view of a published Portfolio for the hosted page. Drafts are never served here.
    """
    portfolio = await retrieve_published_portfolio_by_slug(slug)
    if not portfolio:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "Portfolio not found", "code": "NOT_FOUND"},
        )
    return PortfolioResponse(portfolio=portfolio)
