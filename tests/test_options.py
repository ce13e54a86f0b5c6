from pathlib import Path

import pytest
from pydantic import ValidationError

from rolefilter.filtering import FilterConfig, FilterOptions, load_filter_config, public_directive_sdl
from tests.conftest import TestSchemaData


def test_default_options() -> None:
    options = FilterOptions()

    assert options.annotation_name == "public"
    assert options.role_argument_name == "roles"
    assert options.reporter is None
    assert options.role_resolver is None


@pytest.mark.parametrize("name", ["", "1public", "pub-lic", "with space"])
def test_annotation_name_must_be_a_graphql_name(name: str) -> None:
    with pytest.raises(ValidationError):
        FilterOptions(annotation_name=name)


def test_options_reject_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        FilterOptions(annotation="public")  # type: ignore[call-arg]


def test_options_are_frozen() -> None:
    options = FilterOptions()

    with pytest.raises(ValidationError):
        options.annotation_name = "other"  # type: ignore[misc]


def test_public_directive_sdl() -> None:
    sdl = public_directive_sdl(FilterOptions(annotation_name="visible", role_argument_name="audience"))

    assert sdl.startswith("directive @visible(audience: [String!]) repeatable on OBJECT | FIELD_DEFINITION")
    assert sdl.endswith("INPUT_OBJECT | INPUT_FIELD_DEFINITION")


def test_load_filter_config_defaults_without_file() -> None:
    assert load_filter_config(None) == FilterConfig()


def test_load_filter_config_from_yaml() -> None:
    config = load_filter_config(TestSchemaData.CONFIG)

    assert config.annotation_name == "public"
    assert config.role_argument_name == "roles"
    assert config.roles == ["ADMIN"]
    assert config.fail_on_empty_root is False


@pytest.mark.parametrize("content", ["", "null\n", "{}\n"])
def test_empty_config_means_defaults(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content)

    assert load_filter_config(path) == FilterConfig()


def test_config_root_must_be_a_mapping(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("- public\n- roles\n")

    with pytest.raises(TypeError, match="mapping"):
        load_filter_config(path)


def test_config_rejects_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("annotationName: visible\nrolez: [ADMIN]\n")

    with pytest.raises(ValidationError):
        load_filter_config(path)


def test_config_to_options_carries_names_and_reporter() -> None:
    messages: list[str] = []
    config = FilterConfig.model_validate({"annotationName": "visible", "roleArgumentName": "audience"})

    options = config.to_options(reporter=messages.append)
    options.reporter("hello")  # type: ignore[misc]

    assert options.annotation_name == "visible"
    assert options.role_argument_name == "audience"
    assert messages == ["hello"]
