class BusinessHubError(Exception):
    """Base class for all Business Hub domain exceptions.

    Every subclass declares the HTTP ``status_code`` and the machine
    readable ``error_type`` it maps to, so the API layer can surface all
    domain failures through a single exception handler.
    """

    status_code: int = 400
    error_type: str = "business_hub_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(detail)


class OrganizationContextError(BusinessHubError):
    """Raised when a request does not carry a usable tenant context."""

    status_code = 400
    error_type = "organization_context_missing"

    def __init__(self, detail: str = "Organization and user context required"):
        super().__init__(detail)


class TaskNotFoundError(BusinessHubError):
    """Raised when a requested task does not exist in the organization."""

    status_code = 404
    error_type = "task_not_found"

    def __init__(self, detail: str = "Task not found"):
        super().__init__(detail)


class NotificationNotFoundError(BusinessHubError):
    """Raised when a notification does not exist for the current user."""

    status_code = 404
    error_type = "notification_not_found"

    def __init__(self, detail: str = "Notification not found"):
        super().__init__(detail)


class InvalidPreferenceError(BusinessHubError):
    """Raised when a notification preference update is malformed."""

    status_code = 422
    error_type = "invalid_preference"

    def __init__(self, detail: str = "Invalid notification preference"):
        super().__init__(detail)


class InvalidDragStateError(BusinessHubError):
    """Raised when a drag gesture event arrives out of order."""

    status_code = 409
    error_type = "invalid_drag_state"

    def __init__(self, detail: str = "Drag event not valid in current state"):
        super().__init__(detail)


class SearchQueryError(BusinessHubError):
    """Raised when search filter parameters cannot be parsed."""

    status_code = 422
    error_type = "invalid_search_query"

    def __init__(self, detail: str = "Invalid search parameters"):
        super().__init__(detail)


class PersistenceError(BusinessHubError):
    """Raised when a write to the data store fails.

    The transaction has already been rolled back when this is raised, so
    callers never observe a half-applied mutation.
    """

    status_code = 503
    error_type = "persistence_failed"

    def __init__(self, detail: str = "Could not save changes, please retry"):
        super().__init__(detail)


class CalendarRangeError(BusinessHubError):
    """Raised when a calendar window would fall outside the supported dates."""

    status_code = 422
    error_type = "date_out_of_range"

    def __init__(self, detail: str = "Date is outside the supported calendar range"):
        super().__init__(detail)
