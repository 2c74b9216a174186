from __future__ import annotations

from catalog_browser.domain.browse_state import BrowseSnapshot
from catalog_browser.domain.title import Query, ResultRecord, TitleKind
from catalog_browser.entrypoints.http.dtos.browse import (
    BrowseSnapshotDTO,
    QueryRequestDTO,
    ResultRecordDTO,
)


class BrowseMapper:
    """Maps between REST DTOs and domain models for browse sessions."""

    @staticmethod
    def to_domain_query(dto: QueryRequestDTO) -> Query:
        """
        Converts request body to a domain query.

        Blank year/genre values are treated as "no filter".

        Args:
            dto: The data transfer object containing text and filters

        Returns:
            Query: Domain query value
        """
        return Query(
            text=dto.text,
            kind=TitleKind(dto.type),  # DTO uses 'type', domain uses 'kind'
            year=dto.year or None,
            genre=(dto.genre or "").strip() or None,
        )

    @staticmethod
    def to_query_dto(query: Query) -> QueryRequestDTO:
        return QueryRequestDTO(
            text=query.text,
            type=query.kind.value,
            year=query.year,
            genre=query.genre,
        )

    @staticmethod
    def to_record_response(record: ResultRecord) -> ResultRecordDTO:
        """
        Converts a domain record to its REST DTO.

        The "unavailable" poster sentinel becomes null at the boundary.
        """
        return ResultRecordDTO(
            id=record.id,
            title=record.title,
            year=record.year,
            poster_url=record.poster_url if record.has_poster else None,
            kind=record.kind,
        )

    @staticmethod
    def to_response(session_id: str, snapshot: BrowseSnapshot) -> BrowseSnapshotDTO:
        """
        Converts a controller snapshot to the REST response.

        Args:
            session_id: Session the snapshot belongs to (echoed)
            snapshot: Point-in-time controller state

        Returns:
            BrowseSnapshotDTO: REST response with records and load state
        """
        load_state = snapshot.load_state
        return BrowseSnapshotDTO(
            session_id=session_id,
            query=BrowseMapper.to_query_dto(snapshot.query),
            records=[BrowseMapper.to_record_response(r) for r in snapshot.aggregate],
            status=load_state.status.value,
            reason=load_state.reason,
            error_kind=load_state.error_kind,
            retryable=load_state.retryable,
            has_more=snapshot.has_more,
            page=snapshot.page,
            total_available=snapshot.total_available,
            summary=snapshot.summary,
        )
