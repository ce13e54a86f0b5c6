from .executable import RoleScopedGraphQL, make_public_directive, make_role_filtered_executable_schema
from .resolver import RoleScopedSchemas, resolve_role

__all__ = [
    "RoleScopedGraphQL",
    "RoleScopedSchemas",
    "make_public_directive",
    "make_role_filtered_executable_schema",
    "resolve_role",
]
