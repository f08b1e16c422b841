from typing import Any

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Path, status
from pydantic import ValidationError

from schemas.portfolio import PortfolioCreateRequest, PortfolioDuplicateRequest, PortfolioUpdate
from schemas.response_schema import (
    ErrorResponse,
    PortfolioListResponse,
    PortfolioResponse,
    SuccessResponse,
)
from schemas.tokens_schema import accessTokenOut
from security.auth import verify_token
from services.portfolio_service import (
    add_portfolio,
    duplicate_portfolio,
    publish_portfolio,
    remove_portfolio,
    retrieve_portfolio,
    retrieve_portfolios_for_user,
    update_portfolio_by_id,
)
from services.revalidate_service import trigger_portfolio_revalidate

router = APIRouter(
    prefix="/portfolios",
    tags=["Portfolios"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"error": "Portfolio not found", "code": "NOT_FOUND"},
    )


def _parse_update(body: Any) -> PortfolioUpdate:
    if not isinstance(body, dict):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Invalid request body", "code": "INVALID_DATA"},
        )
    try:
        return PortfolioUpdate.model_validate(body)
    except ValidationError as exc:
        bad_sections = any(error["loc"] and error["loc"][0] == "sections" for error in exc.errors())
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "Invalid sections" if bad_sections else "Invalid portfolio data provided",
                "code": "INVALID_SECTIONS" if bad_sections else "INVALID_DATA",
            },
        ) from exc


# ------------------------------
# List the caller's Portfolios
# ------------------------------
@router.get("", response_model=PortfolioListResponse, response_model_exclude_none=True)
async def list_portfolios(token: accessTokenOut = Depends(verify_token)):
    """
    Lists every portfolio the caller owns, most recently updated first.
    """
    portfolios = await retrieve_portfolios_for_user(user_id=token.userId)
    return PortfolioListResponse(portfolios=portfolios)


# ------------------------------
# Create a new Portfolio
# ------------------------------
@router.post(
    "",
    response_model=PortfolioResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
)
async def create_portfolio(
    payload: PortfolioCreateRequest,
    token: accessTokenOut = Depends(verify_token),
):
    """
    Creates an empty draft Portfolio owned by the caller.
    """
    new_item = await add_portfolio(user_id=token.userId, name=payload.name)
    return PortfolioResponse(portfolio=new_item)


# ------------------------------
# Retrieve a single Portfolio
# ------------------------------
@router.get(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def get_portfolio(
    portfolio_id: str = Path(..., description="portfolio ID to fetch"),
    token: accessTokenOut = Depends(verify_token),
):
    item = await retrieve_portfolio(portfolio_id, user_id=token.userId)
    if not item:
        raise _not_found()
    return PortfolioResponse(portfolio=item)


# ------------------------------
# Replace fields of an existing Portfolio
# ------------------------------
@router.put(
    "/{portfolio_id}",
    response_model=PortfolioResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_portfolio(
    portfolio_id: str = Path(..., description="portfolio ID to update"),
    body: Any = Body(default=None),
    token: accessTokenOut = Depends(verify_token),
):
    """
    Replaces the given fields. A `sections` value replaces the whole list;
    the server stamps `updatedAt` itself.
    """
    payload = _parse_update(body)
    updated_item = await update_portfolio_by_id(portfolio_id, user_id=token.userId, portfolio_data=payload)
    if not updated_item:
        raise _not_found()
    return PortfolioResponse(portfolio=updated_item, message="Portfolio updated successfully")


# ------------------------------
# Delete an existing Portfolio
# ------------------------------
@router.delete(
    "/{portfolio_id}",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def delete_portfolio(
    portfolio_id: str = Path(..., description="portfolio ID to delete"),
    token: accessTokenOut = Depends(verify_token),
):
    deleted = await remove_portfolio(portfolio_id, user_id=token.userId)
    if not deleted:
        raise _not_found()
    return SuccessResponse(message="Portfolio deleted successfully")


# ------------------------------
# Publish a Portfolio
# ------------------------------
@router.post(
    "/{portfolio_id}/publish",
    response_model=PortfolioResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
async def publish(
    background_tasks: BackgroundTasks,
    portfolio_id: str = Path(..., description="portfolio ID to publish"),
    token: accessTokenOut = Depends(verify_token),
):
    """
    Marks the Portfolio published and asks the public site to refresh its page.
    """
    portfolio = await publish_portfolio(portfolio_id, user_id=token.userId)
    if not portfolio:
        raise _not_found()

    background_tasks.add_task(trigger_portfolio_revalidate, portfolio.slug)
    return PortfolioResponse(portfolio=portfolio, message="Portfolio published successfully")


# ------------------------------
# Duplicate a Portfolio
# ------------------------------
@router.post(
    "/{portfolio_id}/duplicate",
    response_model=PortfolioResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def duplicate(
    payload: PortfolioDuplicateRequest,
    portfolio_id: str = Path(..., description="portfolio ID to copy"),
    token: accessTokenOut = Depends(verify_token),
):
    copy = await duplicate_portfolio(portfolio_id, user_id=token.userId, name=payload.name)
    if not copy:
        raise _not_found()
    return PortfolioResponse(portfolio=copy)
