class BackOfficeError(RuntimeError):
    """Base class for errors raised by the back-office application."""
    pass


class ConfigurationError(BackOfficeError):
    """Raised at startup when channel credentials or identifiers are missing."""
    pass


class GatewayError(BackOfficeError):
    """Raised when a chat gateway fails to deliver an outbound message."""
    pass


class RecordNotFoundError(BackOfficeError):
    """Raised when a selected record no longer exists in the store."""

    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity} {key} not found")
        self.entity = entity
        self.key = key


class DuplicateKeyError(BackOfficeError):
    """Raised when an insert violates a unique field of a record store."""

    def __init__(self, collection: str, field: str, value: object) -> None:
        super().__init__(f"{collection}.{field}={value!r} already exists")
        self.collection = collection
        self.field = field
        self.value = value


class InvalidInputError(BackOfficeError):
    """Raised when free text cannot be coerced to an amount, date or time."""

    def __init__(self, label: str, raw: str) -> None:
        super().__init__(f"Invalid {label}: {raw!r}")
        self.label = label
        self.raw = raw
