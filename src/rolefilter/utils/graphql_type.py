from graphql import GraphQLNamedType, GraphQLSchema, GraphQLType, get_named_type

BUILTIN_SCALAR_TYPES = frozenset({"ID", "String", "Int", "Float", "Boolean"})


def is_introspection_type(type_name: str) -> bool:
    return type_name.startswith("__")


def get_root_type_names(schema: GraphQLSchema) -> frozenset[str]:
    """Names of the root operation types the schema actually declares."""
    return frozenset(
        root_type.name
        for root_type in (schema.query_type, schema.mutation_type, schema.subscription_type)
        if root_type is not None
    )


def get_named_type_name(type_: GraphQLType) -> str:
    """
    Unwrap list and non-null wrappers and return the name of the named type.

    e.g. ``[ID!]!`` -> ``ID``, ``String!`` -> ``String``
    """
    named_type: GraphQLNamedType = get_named_type(type_)
    return named_type.name
