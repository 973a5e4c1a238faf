# backend/venuefinder/services/search/predicate_builder.py
"""
Parameterized WHERE-clause assembly for venue search.

Every condition is appended as a Fragment: a SQL template whose `?` markers
stand for bound values, together with exactly those values. Placeholders are
numbered only when the predicate is rendered, so a template and its values
can never drift apart, whatever order conditions were added in.

User-supplied text only ever reaches the datastore as a bound value.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
import logging
from typing import Any, Dict, List, Literal, Optional, Sequence, Tuple

from venuefinder.core.constants import EARTH_RADIUS_MILES, UNCONSTRAINED_CATEGORIES
from venuefinder.core.enums import EventStatus
from venuefinder.core.exceptions import PredicateAssemblyError

from .location_parser import LocationFilter, LocationTerm

logger = logging.getLogger(__name__)

MARKER = "?"

PlaceholderStyle = Literal["named", "numeric"]

_LOCATION_COLUMNS: Dict[str, str] = {
    "city": "v.city",
    "state": "v.state",
    "zipcode": "v.zipcode",
}


@dataclass(frozen=True)
class Fragment:
    """A SQL template plus the values bound to its `?` markers, in order."""

    template: str
    values: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        markers = self.template.count(MARKER)
        if markers != len(self.values):
            raise PredicateAssemblyError(
                f"Fragment has {markers} placeholders but {len(self.values)} values: "
                f"{self.template!r}"
            )

    @classmethod
    def join(cls, fragments: Sequence["Fragment"], joiner: str) -> "Fragment":
        """Combine fragments into one parenthesised group."""
        template = "(" + f" {joiner} ".join(f.template for f in fragments) + ")"
        values: Tuple[Any, ...] = ()
        for f in fragments:
            values += f.values
        return cls(template, values)


class ParameterRenderer:
    """
    Numbers placeholders across any number of fragments rendered in sequence.

    "named" yields :p1, :p2 ... for SQLAlchemy text(); "numeric" yields
    $1, $2 ... for drivers that take positional parameters.
    """

    def __init__(self, style: PlaceholderStyle = "named", prefix: str = "p") -> None:
        self.style = style
        self.prefix = prefix
        self._values: List[Any] = []

    def _placeholder(self, index: int) -> str:
        if self.style == "numeric":
            return f"${index}"
        return f":{self.prefix}{index}"

    def render(self, fragment: Fragment) -> str:
        pieces = fragment.template.split(MARKER)
        out = [pieces[0]]
        for value, piece in zip(fragment.values, pieces[1:]):
            self._values.append(value)
            out.append(self._placeholder(len(self._values)))
            out.append(piece)
        return "".join(out)

    @property
    def values(self) -> List[Any]:
        return list(self._values)

    @property
    def params(self) -> Dict[str, Any]:
        return {f"{self.prefix}{i}": value for i, value in enumerate(self._values, start=1)}


@dataclass(frozen=True)
class RenderedPredicate:
    where_sql: str
    distance_sql: Optional[str]
    params: Dict[str, Any]
    values: List[Any]


@dataclass(frozen=True)
class Predicate:
    """An assembled search predicate, ready to render for a given driver style."""

    conditions: Tuple[Fragment, ...]
    distance: Optional[Fragment] = None
    radius_miles: Optional[float] = None

    @property
    def has_distance(self) -> bool:
        return self.distance is not None

    def render(
        self, style: PlaceholderStyle = "named", with_distance: bool = True
    ) -> RenderedPredicate:
        """
        Render the distance expression (if any) then the WHERE clause.

        With `with_distance=False` only the WHERE clause is rendered, for
        queries that filter on distance but do not select it.

        Raises:
            PredicateAssemblyError: placeholder and value counts disagree
        """
        renderer = ParameterRenderer(style)
        distance = self.distance if with_distance else None
        distance_sql = renderer.render(distance) if distance is not None else None
        if self.conditions:
            where_sql = " AND ".join(renderer.render(c) for c in self.conditions)
        else:
            where_sql = "1=1"

        values = renderer.values
        placeholders = sum(c.template.count(MARKER) for c in self.conditions)
        if distance is not None:
            placeholders += distance.template.count(MARKER)
        if placeholders != len(values):
            raise PredicateAssemblyError(
                f"Rendered {len(values)} parameters for {placeholders} placeholders"
            )
        return RenderedPredicate(
            where_sql=where_sql,
            distance_sql=distance_sql,
            params=renderer.params,
            values=values,
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def distance_expression(lat: float, lng: float) -> Fragment:
    """
    Great-circle distance in miles from (lat, lng) to the venue row.

    The cosine argument is clamped to [-1, 1] so float error on identical
    points cannot push acos out of its domain.
    """
    return Fragment(
        f"({EARTH_RADIUS_MILES} * acos(least(1.0, greatest(-1.0, "
        "cos(radians(?)) * cos(radians(v.lat)) * cos(radians(v.lng) - radians(?))"
        " + sin(radians(?)) * sin(radians(v.lat))))))",
        (lat, lng, lat),
    )


@dataclass
class PredicateBuilder:
    """
    Accumulates search conditions, each appended atomically with its values.

    Methods return self so calls can be chained; absent filters are no-ops.
    """

    conditions: List[Fragment] = field(default_factory=list)
    _distance: Optional[Fragment] = None
    _radius_miles: Optional[float] = None

    def add(self, template: str, *values: Any) -> "PredicateBuilder":
        self.conditions.append(Fragment(template, tuple(values)))
        return self

    def add_published_only(self) -> "PredicateBuilder":
        return self.add("e.status = ?", EventStatus.PUBLISHED.value)

    def add_location(self, location: Optional[LocationFilter]) -> "PredicateBuilder":
        if location is None or not location.terms:
            return self
        parts = [self._location_term(term) for term in location.terms]
        self.conditions.append(Fragment.join(parts, location.joiner))
        return self

    @staticmethod
    def _location_term(term: LocationTerm) -> Fragment:
        column = _LOCATION_COLUMNS[term.field]
        if term.operator == "equals":
            return Fragment(f"{column} = ?", (term.value,))
        return Fragment(
            f"LOWER({column}) LIKE ? ESCAPE '\\'",
            (f"%{_escape_like(term.value)}%",),
        )

    def add_date_range(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> "PredicateBuilder":
        if start_date is not None:
            self.add("e.date >= ?", start_date)
        if end_date is not None:
            self.add("e.date <= ?", end_date)
        return self

    def add_category(self, category: Optional[str]) -> "PredicateBuilder":
        if category is None:
            return self
        normalized = category.strip().lower()
        if normalized in UNCONSTRAINED_CATEGORIES:
            return self
        return self.add("e.category = ?", normalized)

    def add_tag(self, tag: Optional[str]) -> "PredicateBuilder":
        if not tag or not tag.strip():
            return self
        return self.add(
            "EXISTS (SELECT 1 FROM event_tags et WHERE et.event_id = e.id AND et.tag = ?)",
            tag.strip(),
        )

    def add_name(self, name: Optional[str]) -> "PredicateBuilder":
        if not name or not name.strip():
            return self
        return self.add(
            "LOWER(v.name) LIKE ? ESCAPE '\\'",
            f"%{_escape_like(name.strip().lower())}%",
        )

    def add_radius(
        self, lat: Optional[float], lng: Optional[float], radius_miles: float
    ) -> "PredicateBuilder":
        """Add the distance cutoff; both coordinates are required, otherwise a no-op."""
        if lat is None or lng is None:
            return self
        distance = distance_expression(lat, lng)
        self._distance = distance
        self._radius_miles = radius_miles
        self.conditions.append(
            Fragment(f"{distance.template} < ?", distance.values + (radius_miles,))
        )
        return self

    def build(self) -> Predicate:
        return Predicate(
            conditions=tuple(self.conditions),
            distance=self._distance,
            radius_miles=self._radius_miles,
        )
