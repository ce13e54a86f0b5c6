from collections.abc import Callable
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field

from rolefilter import log

GRAPHQL_NAME_PATTERN = r"^[_A-Za-z][_0-9A-Za-z]*$"

DiagnosticReporter = Callable[[str], None]
RoleResolver = Callable[[Any], str | None]


class FilterOptions(BaseModel):
    """Options shared by collection, validation, materialization and role resolution."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    annotation_name: str = Field("public", pattern=GRAPHQL_NAME_PATTERN)
    role_argument_name: str = Field("roles", pattern=GRAPHQL_NAME_PATTERN)
    reporter: DiagnosticReporter | None = None
    role_resolver: RoleResolver | None = None


class FilterConfig(BaseModel):
    """File-based configuration for the command line."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    annotation_name: str = Field("public", alias="annotationName", pattern=GRAPHQL_NAME_PATTERN)
    role_argument_name: str = Field("roles", alias="roleArgumentName", pattern=GRAPHQL_NAME_PATTERN)
    roles: list[str] | None = None
    fail_on_empty_root: bool = Field(False, alias="failOnEmptyRoot")

    def to_options(self, reporter: DiagnosticReporter | None = None) -> FilterOptions:
        return FilterOptions(
            annotation_name=self.annotation_name,
            role_argument_name=self.role_argument_name,
            reporter=reporter,
        )


def load_filter_config(config_path: Path | None) -> FilterConfig:
    """
    Load and validate a filter configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file, or None for defaults.

    Returns:
        A validated FilterConfig.

    Raises:
        OSError: If the file cannot be read.
        yaml.YAMLError: If the file is not valid YAML.
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against FilterConfig fails.
    """
    if config_path is None:
        log.debug("No filter config provided")
        return FilterConfig()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug(f"Loaded filter config from {config_path}")

    # Treat empty file or explicit YAML null as "defaults"
    if raw is None or raw == {}:
        return FilterConfig()

    if not isinstance(raw, dict):
        raise TypeError(f"Filter config root must be a mapping (YAML object), got {type(raw).__name__}")

    return FilterConfig.model_validate(cast(dict[str, Any], raw))
