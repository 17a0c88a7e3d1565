class DomainError(Exception):
    default_message = "request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(DomainError):
    # отсутствие и "не ваше" намеренно неразличимы
    default_message = "not found"


class Forbidden(DomainError):
    default_message = "forbidden"


class CapacityExceeded(DomainError):
    default_message = "Session is full (extra capacity limit reached)"


class Conflict(DomainError):
    default_message = "conflict"


class InvalidRequest(DomainError):
    default_message = "invalid request"
