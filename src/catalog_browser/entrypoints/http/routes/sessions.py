"""Browse session routes.

Each session wraps one pagination controller. Commands that start a fetch
(query, near-end, retry) respond once the fetch they started has settled,
so a single round trip returns the merged results.
"""

from fastapi import APIRouter, Depends, Response, status

from catalog_browser.entrypoints.http.dependencies import get_session_registry
from catalog_browser.entrypoints.http.dtos.browse import (
    BrowseSnapshotDTO,
    QueryRequestDTO,
    RawInputDTO,
)
from catalog_browser.entrypoints.http.error_responses import ErrorResponse
from catalog_browser.entrypoints.http.mappers.browse_mapper import BrowseMapper
from catalog_browser.use_cases.browse_sessions import BrowseSession, BrowseSessionRegistry


router = APIRouter(prefix="/sessions", tags=["Browse sessions"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Unknown session"}}


async def _settled(session: BrowseSession) -> BrowseSnapshotDTO:
    await session.controller.wait_idle()
    return BrowseMapper.to_response(session.session_id, session.snapshot)


@router.post(
    "",
    response_model=BrowseSnapshotDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Open a browse session",
)
async def create_session(
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> BrowseSnapshotDTO:
    session = await registry.create()
    return BrowseMapper.to_response(session.session_id, session.snapshot)


@router.get(
    "/{session_id}",
    response_model=BrowseSnapshotDTO,
    summary="Current session snapshot",
    responses=_NOT_FOUND,
)
async def get_session(
    session_id: str,
    wait: bool = False,
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> BrowseSnapshotDTO:
    """Return the snapshot; with ``wait=true`` wait for in-flight loads first."""
    session = registry.get(session_id)
    if wait:
        return await _settled(session)
    return BrowseMapper.to_response(session.session_id, session.snapshot)


@router.put(
    "/{session_id}/query",
    response_model=BrowseSnapshotDTO,
    summary="Submit a query",
    description="""
    Commit search text and filters immediately (explicit submit).

    A query equal to the current one is a no-op; any difference resets the
    results and loads page 1. An empty text shows popular results.
    """,
    responses={**_NOT_FOUND, 422: {"model": ErrorResponse, "description": "Invalid filters"}},
)
async def submit_query(
    session_id: str,
    body: QueryRequestDTO,
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> BrowseSnapshotDTO:
    session = registry.get(session_id)
    session.submit(BrowseMapper.to_domain_query(body))
    return await _settled(session)


@router.post(
    "/{session_id}/input",
    response_model=BrowseSnapshotDTO,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Report typed text",
    description="Text is committed after the quiet period, keeping the current filters.",
    responses=_NOT_FOUND,
)
async def raw_input(
    session_id: str,
    body: RawInputDTO,
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> BrowseSnapshotDTO:
    session = registry.get(session_id)
    session.type_text(body.text)
    return BrowseMapper.to_response(session.session_id, session.snapshot)


@router.post(
    "/{session_id}/near-end",
    response_model=BrowseSnapshotDTO,
    summary="Signal that the last item is visible",
    description="Loads the next page when more results exist; ignored otherwise.",
    responses=_NOT_FOUND,
)
async def near_end(
    session_id: str,
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> BrowseSnapshotDTO:
    session = registry.get(session_id)
    session.controller.notify_near_end()
    return await _settled(session)


@router.post(
    "/{session_id}/retry",
    response_model=BrowseSnapshotDTO,
    summary="Retry the failed page",
    responses=_NOT_FOUND,
)
async def retry(
    session_id: str,
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> BrowseSnapshotDTO:
    session = registry.get(session_id)
    session.controller.retry()
    return await _settled(session)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close a browse session",
    responses=_NOT_FOUND,
)
async def close_session(
    session_id: str,
    registry: BrowseSessionRegistry = Depends(get_session_registry),
) -> Response:
    await registry.close(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
