class HabitError(Exception):
    """Base for errors surfaced to the caller as a kind plus a readable message."""

    kind = "error"
    status = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class NotAuthenticated(HabitError):
    kind = "unauthenticated"
    status = 401


class NotFound(HabitError):
    kind = "not_found"
    status = 404


class Forbidden(HabitError):
    kind = "forbidden"
    status = 403


class ValidationFailed(HabitError):
    kind = "validation"
    status = 400


class Conflict(HabitError):
    kind = "conflict"
    status = 409


class InsufficientPoints(HabitError):
    kind = "insufficient_points"
    status = 400
