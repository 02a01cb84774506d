"""
Domain Exceptions for the Construction Schedule Engine.

Custom exceptions enforcing business rules:
- Date and duration validity
- Catalog integrity
- Schedule and alert existence
- Persistence outcome
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# =============================================================================
# Validation Exceptions
# =============================================================================

class ValidationError(DomainError):
    """Raised when data validation fails."""

    def __init__(self, field: str, message: str):
        super().__init__(f"Validation failed for '{field}': {message}", code="VALIDATION_ERROR")
        self.field = field


class InvalidDateError(ValidationError):
    """Raised when a date string is not a valid ISO yyyy-MM-dd date."""

    def __init__(self, value, field: str = "date"):
        super().__init__(field, f"'{value}' is not a valid yyyy-MM-dd date")
        self.code = "INVALID_DATE"
        self.value = value


class InvalidDurationError(ValidationError):
    """Raised when a duration or business-day count is out of range."""

    def __init__(self, value, field: str = "duration", minimum: int = 1):
        super().__init__(field, f"{value!r} must be an integer >= {minimum}")
        self.code = "INVALID_DURATION"
        self.value = value
        self.minimum = minimum


# =============================================================================
# Catalog Exceptions
# =============================================================================

class UnknownPhaseError(DomainError):
    """Raised when a strict catalog lookup targets a phase id that does not exist."""

    def __init__(self, phase_id: str):
        message = f"Phase '{phase_id}' is not part of the construction catalog"
        super().__init__(message, code="UNKNOWN_PHASE")
        self.phase_id = phase_id


# =============================================================================
# Schedule Exceptions
# =============================================================================

class ScheduleItemNotFoundError(DomainError):
    """Raised when a schedule row cannot be found."""

    def __init__(self, schedule_id):
        message = f"Schedule item with id '{schedule_id}' not found"
        super().__init__(message, code="SCHEDULE_ITEM_NOT_FOUND")
        self.schedule_id = schedule_id


class InvalidScheduleDateRangeError(DomainError):
    """Raised when a schedule row would end before it starts."""

    def __init__(self, start_date, end_date):
        message = (
            f"Schedule end date ({end_date}) must not be before "
            f"start date ({start_date})"
        )
        super().__init__(message, code="INVALID_SCHEDULE_DATE_RANGE")
        self.start_date = start_date
        self.end_date = end_date


class SchedulePersistenceError(DomainError):
    """Raised when the storage layer rejects a schedule write."""

    def __init__(self, project_id, reason: str):
        message = f"Could not save schedule for project '{project_id}': {reason}"
        super().__init__(message, code="SCHEDULE_PERSISTENCE_FAILED")
        self.project_id = project_id
        self.reason = reason


# =============================================================================
# Alert Exceptions
# =============================================================================

class ScheduleAlertNotFoundError(DomainError):
    """Raised when a schedule alert cannot be found."""

    def __init__(self, alert_id):
        message = f"Schedule alert with id '{alert_id}' not found"
        super().__init__(message, code="SCHEDULE_ALERT_NOT_FOUND")
        self.alert_id = alert_id
