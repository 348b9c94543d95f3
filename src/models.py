"""Data classes for family tree entities and the layout view-model."""

from dataclasses import dataclass, field
from enum import Enum


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"
    UNKNOWN = "UNKNOWN"


class RelationshipType(str, Enum):
    PARENT_CHILD = "PARENT_CHILD"  # individual1 is parent of individual2
    MOTHER_CHILD = "MOTHER_CHILD"
    FATHER_CHILD = "FATHER_CHILD"
    ADOPTED_PARENT_CHILD = "ADOPTED_PARENT_CHILD"
    STEP_PARENT_CHILD = "STEP_PARENT_CHILD"
    SPOUSE = "SPOUSE"
    PARTNER = "PARTNER"
    SIBLING = "SIBLING"
    HALF_SIBLING = "HALF_SIBLING"
    STEP_SIBLING = "STEP_SIBLING"


class RelationKind(str, Enum):
    PARENT_CHILD = "parent_child"
    SPOUSE = "spouse"
    SIBLING = "sibling"


_KIND_BY_TYPE = {
    RelationshipType.PARENT_CHILD: RelationKind.PARENT_CHILD,
    RelationshipType.MOTHER_CHILD: RelationKind.PARENT_CHILD,
    RelationshipType.FATHER_CHILD: RelationKind.PARENT_CHILD,
    RelationshipType.ADOPTED_PARENT_CHILD: RelationKind.PARENT_CHILD,
    RelationshipType.STEP_PARENT_CHILD: RelationKind.PARENT_CHILD,
    RelationshipType.SPOUSE: RelationKind.SPOUSE,
    RelationshipType.PARTNER: RelationKind.SPOUSE,
    RelationshipType.SIBLING: RelationKind.SIBLING,
    RelationshipType.HALF_SIBLING: RelationKind.SIBLING,
    RelationshipType.STEP_SIBLING: RelationKind.SIBLING,
}


def classify(relationship_type: RelationshipType) -> RelationKind:
    """Map a concrete relationship type onto the kind traversal code branches on."""
    return _KIND_BY_TYPE[RelationshipType(relationship_type)]


class ViewMode(str, Enum):
    ANCESTORS = "ancestors"
    DESCENDANTS = "descendants"
    BOTH = "both"


class EdgeKind(str, Enum):
    PARENT_CHILD = "parentChild"
    SPOUSE = "spouse"


@dataclass(frozen=True)
class Individual:
    id: str
    given_name: str | None = None
    middle_name: str | None = None
    surname: str | None = None
    gender: Gender = Gender.UNKNOWN
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    death_date: str | None = None  # ISO format YYYY-MM-DD or None
    avatar_url: str | None = None

    @property
    def full_name(self) -> str:
        # Family name first, then middle and given names
        parts = [p.strip() for p in (self.surname, self.middle_name, self.given_name) if p and p.strip()]
        return " ".join(parts) if parts else "Unknown"

    @property
    def initials(self) -> str:
        given = (self.given_name or "").strip()
        surname = (self.surname or "").strip()
        return (given[:1] + surname[:1]).upper() or "?"

    @property
    def life_years(self) -> str:
        if not self.birth_date and not self.death_date:
            return ""
        birth_year = self.birth_date[:4] if self.birth_date else ""
        death_year = self.death_date[:4] if self.death_date else ""
        return f"{birth_year} - {death_year}"


@dataclass(frozen=True)
class Relationship:
    id: str
    individual1_id: str
    individual2_id: str
    relationship_type: RelationshipType

    @property
    def kind(self) -> RelationKind:
        return classify(self.relationship_type)


@dataclass
class TreeNode:
    """One primary node of a built hierarchy.

    `children` holds the next generation in the traversal direction: real
    children for a descendant walk, parents for an ancestor walk. Spouses are
    satellites and are never expanded here.
    """

    individual: Individual
    children: list["TreeNode"] = field(default_factory=list)
    spouses: list[Individual] = field(default_factory=list)
    generation: int = 0

    @property
    def id(self) -> str:
        return self.individual.id


@dataclass
class FamilyView:
    mode: ViewMode
    root: TreeNode
    ancestors: list[TreeNode] = field(default_factory=list)
    siblings: list[TreeNode] = field(default_factory=list)
    ancestor_count: int = 0
    max_generation: int = 0


@dataclass(frozen=True)
class Perspective:
    individual_id: str | None  # None means the auto-selected default view
    view_mode: ViewMode


@dataclass(frozen=True)
class RenderNode:
    individual_id: str
    x: float
    y: float
    is_root: bool = False
    spouse_of: str | None = None
    generation: int = 0


@dataclass
class RenderEdge:
    source_id: str
    target_id: str
    kind: EdgeKind
    path: str = ""


@dataclass(frozen=True)
class NavigationIntent:
    action: str  # "open_detail" or "re_root"
    individual_id: str
