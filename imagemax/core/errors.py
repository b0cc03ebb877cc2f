"""
Request-level errors.

These abort a whole request and are mapped to HTTP responses in main.py.
Per-provider failures never use them: they travel as failed ImageResult values.
"""


class ImageMaxError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(ImageMaxError):
    status_code = 401


class InvalidRequestError(ImageMaxError):
    status_code = 400


class NotFoundError(ImageMaxError):
    status_code = 404


class InternalError(ImageMaxError):
    status_code = 500
