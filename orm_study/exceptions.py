class EnvNotFoundError(Exception):
    """Raised when a required environment variable is not found."""

    def __init__(self, env_var_name: str):
        super().__init__(f"Environment variable '{env_var_name}' not found.")


class NoSessionError(Exception):
    """Raised when there is no active database session."""

    def __init__(self):
        super().__init__("No active database session found.")


class SessionNotSetError(Exception):
    """Raised when the database session is not set."""

    def __init__(self):
        super().__init__("Database session is not set.")


class MissingDBNameError(Exception):
    """Raised when a database operation needs a database name but none is configured."""

    def __init__(self):
        super().__init__("Database name is not set.")


class EntityNotFoundError(LookupError):
    """Raised when a single-result fetch finds no row."""

    def __init__(self, entity_name: str, key: object):
        self.entity_name = entity_name
        self.key = key
        super().__init__(f"{entity_name} '{key}' not found.")


class QueryFailedError(Exception):
    """Raised when a query cannot be executed against the database."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Query failed: {operation}.")


class InvalidPageableError(ValueError):
    """Raised when pagination parameters are out of range."""

    def __init__(self, field_name: str, value: int):
        super().__init__(f"Invalid pagination value for '{field_name}': {value}.")


class NotEnoughStockError(Exception):
    """Raised when an item does not have enough stock left."""

    def __init__(self, item_name: str, requested: int, available: int):
        super().__init__(f"Not enough stock for '{item_name}': requested {requested}, available {available}.")


class OrderAlreadyDeliveredError(Exception):
    """Raised when cancelling an order whose delivery has completed."""

    def __init__(self, order_id: int | None):
        super().__init__(f"Order '{order_id}' has already been delivered and cannot be cancelled.")


class OrderAlreadyCancelledError(Exception):
    """Raised when cancelling an order that is already cancelled."""

    def __init__(self, order_id: int | None):
        super().__init__(f"Order '{order_id}' is already cancelled.")


class InvalidQuantityError(ValueError):
    """Raised when an order line asks for less than one unit."""

    def __init__(self, item_name: str, count: int):
        super().__init__(f"Invalid quantity for '{item_name}': {count}. At least 1 is required.")
