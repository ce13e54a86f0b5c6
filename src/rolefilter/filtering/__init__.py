"""Role-scoped views of an annotated GraphQL schema."""

from .annotations import AnnotationReader, normalize_roles, public_directive_sdl
from .api import (
    CollectionResult,
    collect_and_validate,
    filter_schema_sdl_per_role,
    materialize_all,
    materialize_for_role,
)
from .context import DEFAULT_ROLE, InputValueRef, RoleContext
from .diagnostics import Diagnostic, DiagnosticKind
from .errors import SchemaStructureError
from .options import FilterConfig, FilterOptions, load_filter_config

__all__ = [
    "DEFAULT_ROLE",
    "AnnotationReader",
    "CollectionResult",
    "Diagnostic",
    "DiagnosticKind",
    "FilterConfig",
    "FilterOptions",
    "InputValueRef",
    "RoleContext",
    "SchemaStructureError",
    "collect_and_validate",
    "filter_schema_sdl_per_role",
    "load_filter_config",
    "materialize_all",
    "materialize_for_role",
    "normalize_roles",
    "public_directive_sdl",
]
