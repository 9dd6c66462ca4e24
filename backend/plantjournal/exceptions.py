# data layer exceptions
# raised by the id codec, crud helpers, connection manager and the store facade


class PlantJournalError(Exception):
    """base exception for all plant journal data layer errors"""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class DatabaseConnectionError(PlantJournalError):
    """the shared mongodb connection could not be established"""


class InvalidIdentifier(PlantJournalError):
    """an external id is not a well-formed objectid string"""

    def __init__(self, value):
        super().__init__(f"Invalid identifier: {value!r}", details={"value": repr(value)})
        self.value = value


class ValidationError(PlantJournalError):
    """a required field is missing or has an unusable value"""


class ReadError(PlantJournalError):
    """a find against a collection failed"""


class WriteError(PlantJournalError):
    """an insert, update or delete against a collection failed"""
