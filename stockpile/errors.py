class StockpileError(Exception):
    """Base for failures that abort a resource transaction."""

    kind = "error"
    safe_message = "Request failed."

    def __init__(self, message=None):
        self.message = message or self.safe_message
        super().__init__(self.message)


class NotFound(StockpileError):
    """Raised when a resource id does not exist."""

    kind = "not_found"
    safe_message = "Resource not found."

    def __init__(self, resource_id):
        self.resource_id = resource_id
        super().__init__(f"Resource {resource_id} not found.")


class InvalidUpdateRequest(StockpileError):
    """Raised when an update body is malformed or ambiguous."""

    kind = "invalid_update"
    safe_message = "Invalid update request."


class PersistenceError(StockpileError):
    """
    Raised when the store is unavailable or a concurrent write conflicted.

    The underlying driver exception is kept on ``__cause__`` for logging; only
    ``safe_message`` is ever sent to callers.
    """

    kind = "persistence_error"
    safe_message = "The update could not be saved. Please retry."

    def __init__(self, message=None, conflict=False):
        self.conflict = conflict
        super().__init__(message)
