"""Loading individuals and relationships from a JSON export, and date handling utilities."""

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
import re

from models import Gender, Individual, Relationship, RelationshipType

logger = logging.getLogger(__name__)


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

_QUALIFIER_RE = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)

# (pattern, meaning of each captured group)
_DATE_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:T.*)?$"), "ymd"),  # 1839-08-29, ISO timestamps
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), "dmy"),  # 25 NOV 1954, 02 May1838
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), "my"),  # NOV 1954, May, 1837
    (re.compile(r"^(\d{4})$"), "y"),  # 1698
    (re.compile(r"^(\d{1,2})[-/ ](\d{1,2})[-/ ](\d{4})$"), "mdy"),  # 01-27-1920, 04 05 1911
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), "mdy"),  # April 17, 1850
]

_GENDERS = {
    "M": Gender.MALE,
    "MALE": Gender.MALE,
    "F": Gender.FEMALE,
    "FEMALE": Gender.FEMALE,
    "O": Gender.OTHER,
    "OTHER": Gender.OTHER,
}


def _month(token: str) -> int | None:
    if token.isdigit():
        return int(token)
    return MONTH_MAP.get(token.upper().rstrip("."))


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a free-form date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Missing month or day default to 1, so "1698" becomes "1698-01-01" and
    "ABOUT 1905" becomes "1905-01-01".
    """
    if not date_str:
        return None

    s = str(date_str).strip().strip("()").rstrip("?")
    s = _QUALIFIER_RE.sub("", s).strip()
    if not s:
        return None

    for pattern, order in _DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue
        parts = dict(zip(order, match.groups()))
        year = int(parts["y"])
        month = _month(parts["m"]) if "m" in parts else 1
        day = int(parts["d"]) if "d" in parts else 1
        if month is None:
            return None
        # 1746-00-00 style placeholders
        month = month or 1
        day = day or 1
        if 1 <= month <= 12 and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"
        return None

    return None


def parse_gender(value: str | None) -> Gender:
    if not value:
        return Gender.UNKNOWN
    return _GENDERS.get(str(value).strip().upper(), Gender.UNKNOWN)


def _ref(record: dict, key: str) -> str | None:
    # Accept both {"individual1": {"id": ...}} and {"individual1Id": ...}
    nested = record.get(key)
    if isinstance(nested, dict):
        nested = nested.get("id")
    value = nested if nested is not None else record.get(f"{key}Id")
    return str(value) if value is not None else None


@dataclass
class GraphDocument:
    individuals: list[Individual] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    perspective_id: str | None = None
    layout: dict = field(default_factory=dict)


def parse_individual(record: dict) -> Individual:
    if record.get("id") is None:
        raise ValueError(f"Individual record without id: {record}")

    birth = record.get("birthDate")
    death = record.get("deathDate")
    birth_date = parse_date_string(birth)
    death_date = parse_date_string(death)
    if birth and birth_date is None:
        logger.debug("Unparseable birth date %r for %s", birth, record["id"])
    if death and death_date is None:
        logger.debug("Unparseable death date %r for %s", death, record["id"])

    return Individual(
        id=str(record["id"]),
        given_name=record.get("givenName"),
        middle_name=record.get("middleName"),
        surname=record.get("surname"),
        gender=parse_gender(record.get("gender")),
        birth_date=birth_date,
        death_date=death_date,
        avatar_url=record.get("profilePictureUrl"),
    )


def parse_relationship(record: dict, index: int) -> Relationship | None:
    """Build a Relationship, or None (with a warning) when its type is not recognised."""
    individual1_id = _ref(record, "individual1")
    individual2_id = _ref(record, "individual2")
    if individual1_id is None or individual2_id is None:
        raise ValueError(f"Relationship record missing an individual reference: {record}")

    raw_type = str(record.get("type", "")).strip().upper()
    try:
        relationship_type = RelationshipType(raw_type)
    except ValueError:
        logger.warning("Skipping relationship with unknown type %r: %s", raw_type, record)
        return None

    return Relationship(
        id=str(record.get("id", f"rel-{index}")),
        individual1_id=individual1_id,
        individual2_id=individual2_id,
        relationship_type=relationship_type,
    )


def parse_document(data: dict) -> GraphDocument:
    """
    Extract individuals and relationships from a decoded JSON document.

    Expected shape (keys as produced by the tree API)::

        {
          "individuals": [{"id": "...", "givenName": "...", "gender": "MALE", ...}],
          "relationships": [{"id": "...", "individual1": {"id": "..."},
                             "individual2": {"id": "..."}, "type": "PARENT_CHILD"}],
          "perspectiveId": "...",   # optional
          "layout": {...}           # optional LayoutConfig overrides
        }
    """
    if not isinstance(data, dict):
        raise ValueError("Graph document must be a JSON object")

    doc = GraphDocument(
        perspective_id=data.get("perspectiveId"),
        layout=dict(data.get("layout") or {}),
    )
    doc.individuals = [parse_individual(rec) for rec in data.get("individuals", [])]
    for index, rec in enumerate(data.get("relationships", [])):
        rel = parse_relationship(rec, index)
        if rel is not None:
            doc.relationships.append(rel)
    return doc


def load_graph_json(filepath: Path) -> GraphDocument:
    """Read a JSON graph export from disk."""
    with open(filepath, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{filepath} is not valid JSON: {e}") from e
    return parse_document(data)
