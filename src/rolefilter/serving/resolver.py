"""Dynamic mode: resolve a role per request and serve its materialized schema.

The original schema and all validated contexts stay resident; each role's schema
is materialized on first use and cached. Roles that no declaration mentions all
share one schema, so request-supplied role names cannot grow the cache. Cached
schemas are never mutated, so they can be shared by concurrent requests. A new source schema needs a new
``RoleScopedSchemas``: there is no incremental update path.
"""

import threading
from typing import Any

from graphql import GraphQLSchema

from rolefilter import log
from rolefilter.filtering.api import CollectionResult, collect_and_validate, materialize_for_role
from rolefilter.filtering.context import DEFAULT_ROLE, RoleContext
from rolefilter.filtering.options import FilterOptions
from rolefilter.filtering.validator import validate


def resolve_role(options: FilterOptions, request_context: Any) -> str:
    """Ask the configured role resolver for the request's role; no resolver or no role means DEFAULT."""
    if options.role_resolver is None:
        return DEFAULT_ROLE
    return options.role_resolver(request_context) or DEFAULT_ROLE


class RoleScopedSchemas:
    def __init__(self, schema: GraphQLSchema, options: FilterOptions | None = None) -> None:
        self.schema = schema
        self.options = options or FilterOptions()
        self.result: CollectionResult = collect_and_validate(schema, self.options)
        self._cache: dict[str, GraphQLSchema] = {}
        self._unknown_role_schema: GraphQLSchema | None = None
        self._lock = threading.Lock()

    @property
    def roles(self) -> list[str]:
        return self.result.roles

    def context_for(self, role: str) -> RoleContext:
        """Return the validated context of a role.

        A role no declaration mentions gets a fresh, empty context: it sees only the
        root operation types and the built-in scalars.
        """
        context = self.result.contexts_by_role.get(role)
        if context is not None:
            return context

        log.debug(f"Role '{role}' is not granted anything in the schema")
        context = RoleContext.create(role, self.result.contexts_by_role[DEFAULT_ROLE].root_types)
        validate(self.schema, {role: context}, self.options.reporter)
        return context

    def for_role(self, role: str | None) -> GraphQLSchema:
        role = role or DEFAULT_ROLE
        if role not in self.result.contexts_by_role:
            return self._for_unknown_role(role)

        cached = self._cache.get(role)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._cache.get(role)
            if cached is None:
                cached = materialize_for_role(self.schema, self.context_for(role), self.options)
                self._cache[role] = cached
                log.debug(f"Cached materialized schema for role '{role}'")
        return cached

    def _for_unknown_role(self, role: str) -> GraphQLSchema:
        schema = self._unknown_role_schema
        if schema is not None:
            return schema

        with self._lock:
            schema = self._unknown_role_schema
            if schema is None:
                schema = materialize_for_role(self.schema, self.context_for(role), self.options)
                self._unknown_role_schema = schema
                log.debug(f"Cached the schema shared by roles without grants (first requested as '{role}')")
        return schema

    def for_request(self, request_context: Any) -> GraphQLSchema:
        return self.for_role(resolve_role(self.options, request_context))
