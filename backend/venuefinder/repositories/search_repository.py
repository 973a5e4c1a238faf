# backend/venuefinder/repositories/search_repository.py
"""
Ranked venue search against the datastore.

Runs in two phases on a single pooled connection:
1. count the distinct venues matching the predicate
2. fetch each matching venue with its soonest qualifying event

Candidates are ordered with the search sort key and paged in Python, so the
ordering rule lives in one testable place instead of inside SQL.
"""
from __future__ import annotations

from dataclasses import replace
import datetime
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import Date, bindparam, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from ..core.exceptions import QueryExecutionException, is_db_pool_exhaustion
from ..core.request_context import Deadline
from ..services.search.metrics import (
    record_search_failure,
    record_search_latency,
    record_search_result,
)
from ..services.search.predicate_builder import Predicate
from ..services.search.ranking import order_search_results
from ..services.search.types import CompositeResultRow, SearchPage
from ..utils.time_helpers import as_date

logger = logging.getLogger(__name__)

_COUNT_SQL = """
    SELECT COUNT(DISTINCT v.id) AS total
    FROM events e
    JOIN venues v ON v.id = e.venue_id
    WHERE {where}
"""

_FETCH_SQL = """
    SELECT * FROM (
        SELECT
            v.id AS venue_id,
            v.name AS venue_name,
            v.city,
            v.state,
            v.zipcode,
            v.lat,
            v.lng,
            v.website,
            v.image_url,
            v.description AS venue_description,
            v.subscription_tier,
            v.verification_status,
            v.food_service_type,
            v.bar_service_type,
            e.id AS event_id,
            e.date AS event_date,
            e.category,
            e.description AS event_description,
            {distance} AS distance,
            ROW_NUMBER() OVER (PARTITION BY v.id ORDER BY e.date ASC, e.id ASC) AS venue_rank
        FROM events e
        JOIN venues v ON v.id = e.venue_id
        WHERE {where}
    ) soonest
    WHERE soonest.venue_rank = 1
"""

_TAGS_SQL = text(
    "SELECT event_id, tag FROM event_tags WHERE event_id IN :event_ids ORDER BY tag"
).bindparams(bindparam("event_ids", expanding=True))


def _typed_text(sql: str, params: Dict[str, Any]) -> TextClause:
    """text() with date parameters typed so every driver binds them as dates."""
    date_binds = [
        bindparam(name, type_=Date())
        for name, value in params.items()
        if isinstance(value, datetime.date)
    ]
    statement = text(sql)
    if date_binds:
        statement = statement.bindparams(*date_binds)
    return statement


class RankedSearchExecutor:
    """
    Executes an assembled Predicate and returns one page of composite rows.

    Holds an Engine rather than a Session: each call checks a connection out
    of the pool for exactly the duration of the search.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def execute(
        self,
        predicate: Predicate,
        limit: int,
        offset: int,
        by_distance: bool = False,
        deadline: Optional[Deadline] = None,
    ) -> SearchPage:
        """
        Count then fetch.

        Raises:
            QueryExecutionException: datastore failure or deadline exceeded
        """
        phase = "count"
        try:
            with self.engine.connect() as conn:
                self._check_deadline(conn, deadline, phase)
                started = time.perf_counter()
                total = self._count(conn, predicate)
                record_search_latency(phase, (time.perf_counter() - started) * 1000)
                record_search_result(total)
                if total == 0:
                    return SearchPage(total_count=0, rows=[], limit=limit, offset=offset)

                phase = "fetch"
                self._check_deadline(conn, deadline, phase)
                started = time.perf_counter()
                candidates = self._fetch(conn, predicate)
                ordered = order_search_results(candidates, by_distance=by_distance)
                # Never report more rows than were counted
                rows = ordered[offset : offset + limit][: max(0, total - offset)]
                rows = self._attach_tags(conn, rows)
                record_search_latency(phase, (time.perf_counter() - started) * 1000)
        except QueryExecutionException:
            record_search_failure(phase)
            raise
        except SQLAlchemyError as exc:
            record_search_failure(phase)
            logger.error(f"Venue search failed during {phase} phase: {exc}")
            raise QueryExecutionException(
                details={"phase": phase, "pool_exhausted": is_db_pool_exhaustion(exc)}
            ) from exc

        return SearchPage(total_count=total, rows=rows, limit=limit, offset=offset)

    def _check_deadline(self, conn: Connection, deadline: Optional[Deadline], phase: str) -> None:
        if deadline is None:
            return
        if deadline.expired:
            logger.warning(f"Search deadline exceeded before {phase} phase")
            raise QueryExecutionException(details={"phase": phase, "deadline_exceeded": True})
        if conn.dialect.name == "postgresql":
            # Transaction-local; dies with the connection's implicit transaction
            conn.execute(
                text("SELECT set_config('statement_timeout', :timeout, true)"),
                {"timeout": str(max(1, deadline.remaining_ms()))},
            )

    def _count(self, conn: Connection, predicate: Predicate) -> int:
        rendered = predicate.render(with_distance=False)
        sql = _COUNT_SQL.format(where=rendered.where_sql)
        total = conn.execute(_typed_text(sql, rendered.params), rendered.params).scalar()
        return int(total or 0)

    def _fetch(self, conn: Connection, predicate: Predicate) -> List[CompositeResultRow]:
        rendered = predicate.render()
        sql = _FETCH_SQL.format(
            distance=rendered.distance_sql or "NULL",
            where=rendered.where_sql,
        )
        result = conn.execute(_typed_text(sql, rendered.params), rendered.params)
        return [
            CompositeResultRow(
                venue_id=row.venue_id,
                venue_name=row.venue_name,
                city=row.city,
                state=row.state,
                zipcode=row.zipcode,
                lat=float(row.lat) if row.lat is not None else None,
                lng=float(row.lng) if row.lng is not None else None,
                website=row.website,
                image_url=row.image_url,
                venue_description=row.venue_description,
                subscription_tier=row.subscription_tier,
                verification_status=row.verification_status,
                food_service_type=row.food_service_type,
                bar_service_type=row.bar_service_type,
                event_id=row.event_id,
                event_date=as_date(row.event_date),
                category=row.category,
                event_description=row.event_description,
                distance=float(row.distance) if row.distance is not None else None,
            )
            for row in result
        ]

    def _attach_tags(
        self, conn: Connection, rows: Sequence[CompositeResultRow]
    ) -> List[CompositeResultRow]:
        if not rows:
            return []
        tags_by_event: Dict[int, List[str]] = {}
        result = conn.execute(_TAGS_SQL, {"event_ids": [row.event_id for row in rows]})
        for event_id, tag in result:
            tags_by_event.setdefault(event_id, []).append(tag)
        return [replace(row, tags=tags_by_event.get(row.event_id, [])) for row in rows]
