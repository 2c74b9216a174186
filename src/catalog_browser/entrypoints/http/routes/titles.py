from fastapi import APIRouter, Depends

from catalog_browser.entrypoints.http.dependencies import get_title_detail_use_case
from catalog_browser.entrypoints.http.dtos.title import TitleDetailResponseDTO
from catalog_browser.entrypoints.http.error_responses import ErrorResponse
from catalog_browser.entrypoints.http.mappers.title_mapper import TitleMapper
from catalog_browser.use_cases.get_title_detail import GetTitleDetail, GetTitleDetailRequest


router = APIRouter(tags=["Titles"])


@router.get(
    "/titles/{title_id}",
    response_model=TitleDetailResponseDTO,
    summary="Get title details",
    description="""
    Fetch full metadata for one title from the upstream catalog.

    ## Example
    ```
    GET /v1/titles/tt0468569
    ```
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Title not found"},
        422: {"model": ErrorResponse, "description": "Blank title identifier"},
        502: {"model": ErrorResponse, "description": "Upstream unavailable"},
    },
)
async def get_title(
    title_id: str,
    use_case: GetTitleDetail = Depends(get_title_detail_use_case),
) -> TitleDetailResponseDTO:
    """Get title endpoint following parse → execute → map → return pattern."""
    result = await use_case.execute(GetTitleDetailRequest(title_id=title_id))

    return TitleMapper.to_response(result.title)
