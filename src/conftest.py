import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pytest  # noqa: E402

from models import Gender, Individual, Relationship, RelationshipType  # noqa: E402


@pytest.fixture()
def person():
    def make(pid: str, gender: Gender = Gender.UNKNOWN, birth: str | None = None, **kwargs) -> Individual:
        kwargs.setdefault("given_name", pid)
        return Individual(id=pid, gender=gender, birth_date=birth, **kwargs)

    return make


@pytest.fixture()
def rel():
    counter = iter(range(1, 10_000))

    def make(a: str, b: str, relationship_type: RelationshipType = RelationshipType.PARENT_CHILD) -> Relationship:
        return Relationship(f"r{next(counter)}", a, b, relationship_type)

    return make


@pytest.fixture()
def small_family(person, rel):
    """A with children B and C, married to S."""
    individuals = [person("A"), person("B"), person("C"), person("S")]
    relationships = [
        rel("A", "B"),
        rel("A", "C"),
        rel("A", "S", RelationshipType.SPOUSE),
    ]
    return individuals, relationships


@pytest.fixture()
def nuclear_family(person, rel):
    """
    Graph:
        F (male) --spouse-- M (female)
          |                   |
          +--- P, Q ----------+
        P --spouse-- S
        P -> K
    """
    individuals = [
        person("P", Gender.MALE),
        person("M", Gender.FEMALE),
        person("F", Gender.MALE),
        person("Q"),
        person("S", Gender.FEMALE),
        person("K"),
    ]
    relationships = [
        rel("M", "P", RelationshipType.MOTHER_CHILD),
        rel("F", "P", RelationshipType.FATHER_CHILD),
        rel("F", "Q"),
        rel("M", "Q"),
        rel("F", "M", RelationshipType.SPOUSE),
        rel("P", "S", RelationshipType.PARTNER),
        rel("P", "K"),
    ]
    return individuals, relationships


@pytest.fixture(autouse=True)
def _close_figures():
    yield
    plt.close("all")


@pytest.fixture()
def long_line(person, rel):
    """1500 generations of single parent -> child links, p0 at the top."""
    individuals = [person(f"p{i}") for i in range(1500)]
    relationships = [rel(f"p{i}", f"p{i + 1}") for i in range(1499)]
    return individuals, relationships
