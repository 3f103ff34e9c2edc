"""
Domain errors raised by the grade engine.

Routers never catch these: middlewares/error_handler.py maps each class to an
HTTP status and the standard error body.
"""


class NovaBulletinError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(NovaBulletinError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier):
        super().__init__(f"{resource} {identifier} not found")
        self.resource = resource
        self.identifier = identifier


class InvalidInputError(NovaBulletinError):
    status_code = 400
    code = "INVALID_INPUT"


class NoGradesError(InvalidInputError):
    code = "NO_GRADES"


class ConflictError(NovaBulletinError):
    status_code = 409
    code = "CONFLICT"
