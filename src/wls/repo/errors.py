"""Entity store errors."""


class NoRecordError(LookupError):
    """No row matched the lookup, or an update/delete affected zero rows.

    This is the only absence signal the store raises. Every other database
    error propagates unchanged.
    """
