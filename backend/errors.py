"""
Error taxonomy for the API.

Every route raises one of these; the handlers registered in main.py turn them
into ``{"error": message}`` bodies with the matching HTTP status.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AppError):
    status_code = 400


class InvalidId(AppError):
    status_code = 400

    def __init__(self, message: str = "Invalid ID"):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404

    def __init__(self, entity: str, id=None):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.id = id


class Conflict(AppError):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Internal(AppError):
    status_code = 500
