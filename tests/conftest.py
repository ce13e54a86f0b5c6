import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from graphql import GraphQLSchema
from hypothesis import strategies as st
from hypothesis.strategies import composite

from rolefilter.filtering import FilterOptions
from rolefilter.utils.schema_loader import build_schema_from_str

ROLES = ["DEFAULT", "ADMIN", "PARTNER"]


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    SHOP: Path = TESTS_DATA_DIR / "shop.graphql"
    SUPPLIER_RATING: Path = TESTS_DATA_DIR / "supplier_rating.graphql"
    LIBRARY: Path = TESTS_DATA_DIR / "library.graphql"
    CONFIG: Path = TESTS_DATA_DIR / "config.yaml"


class DiagnosticSink:
    """Collects reported diagnostic messages instead of logging them."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def sink() -> DiagnosticSink:
    return DiagnosticSink()


@pytest.fixture
def options(sink: DiagnosticSink) -> FilterOptions:
    return FilterOptions(reporter=sink)


def quiet_options(**kwargs: Any) -> FilterOptions:
    return FilterOptions(reporter=lambda _: None, **kwargs)


def schema_from_sdl(sdl: str, options: FilterOptions | None = None) -> GraphQLSchema:
    return build_schema_from_str(sdl, options or quiet_options())


@pytest.fixture(scope="module")
def shop_schema() -> GraphQLSchema:
    assert TestSchemaData.SHOP.exists(), f"Missing test file: {TestSchemaData.SHOP}"
    return schema_from_sdl(TestSchemaData.SHOP.read_text())


@composite
def annotation_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> str:
    """Generate no annotation, a bare annotation or an annotation with a role list."""
    kind = draw(st.sampled_from(["none", "bare", "roles"]))
    if kind == "none":
        return ""
    if kind == "bare":
        return " @public"
    roles = draw(st.lists(st.sampled_from(ROLES), min_size=1, max_size=len(ROLES), unique=True))
    return f" @public(roles: {json.dumps(roles)})"


@composite
def annotated_definitions_strategy(draw: Callable[[st.SearchStrategy[Any]], Any]) -> list[str]:
    """Generate the definitions of a random annotated schema, one type definition per item.

    Input types may reference each other in cycles; unions, interfaces and arguments
    are annotated independently of the types they reference.
    """
    num_interfaces = draw(st.integers(min_value=0, max_value=2))
    num_objects = draw(st.integers(min_value=1, max_value=4))
    num_unions = draw(st.integers(min_value=0, max_value=2))
    num_inputs = draw(st.integers(min_value=0, max_value=3))

    definitions = []
    for i in range(num_interfaces):
        annotation, id_annotation = draw(annotation_strategy()), draw(annotation_strategy())
        definitions.append(f"interface Node{i}{annotation} {{ id: ID!{id_annotation} }}")

    for i in range(num_objects):
        interfaces = (
            draw(st.lists(st.integers(min_value=0, max_value=num_interfaces - 1), unique=True))
            if num_interfaces
            else []
        )
        implements = f" implements {' & '.join(f'Node{n}' for n in interfaces)}" if interfaces else ""
        link = draw(st.integers(min_value=0, max_value=num_objects - 1))
        definitions.append(
            f"type Item{i}{implements}{draw(annotation_strategy())} {{\n"
            f"  id: ID!{draw(annotation_strategy())}\n"
            f"  link: Item{link}{draw(annotation_strategy())}\n"
            "}"
        )

    for i in range(num_unions):
        members = draw(st.lists(st.integers(min_value=0, max_value=num_objects - 1), min_size=1, unique=True))
        definitions.append(f"union Group{i}{draw(annotation_strategy())} = {' | '.join(f'Item{m}' for m in members)}")

    for i in range(num_inputs):
        nested = draw(st.integers(min_value=0, max_value=num_inputs - 1))
        required = f"\n  code: Int!{draw(annotation_strategy())}" if draw(st.booleans()) else ""
        definitions.append(
            f"input Filter{i}{draw(annotation_strategy())} {{\n"
            f"  value: String{draw(annotation_strategy())}\n"
            f"  next: Filter{nested}{draw(annotation_strategy())}"
            f"{required}\n"
            "}"
        )

    query_fields = [f"item{i}: Item{i}{draw(annotation_strategy())}" for i in range(num_objects)]
    query_fields += [f"group{i}: Group{i}{draw(annotation_strategy())}" for i in range(num_unions)]
    for i in range(num_inputs):
        bang = "!" if draw(st.booleans()) else ""
        query_fields.append(
            f"search{i}(filter: Filter{i}{bang}{draw(annotation_strategy())}, limit: Int): [Item0]"
            f"{draw(annotation_strategy())}"
        )
    definitions.append("type Query {\n  " + "\n  ".join(query_fields) + "\n}")

    return definitions
