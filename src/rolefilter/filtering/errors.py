class SchemaStructureError(ValueError):
    """Raised when the input schema cannot be resolved.

    This error indicates a malformed upstream schema, e.g. a field whose
    declared type does not exist in the schema's type map. It aborts the
    whole operation before any role context is produced.
    """
