"""
errors.py – Exception taxonomy của service.
Routes chuyển các lỗi này thành HTTP status tương ứng.
"""


class AppError(Exception):
    status_code = 500


class NotFoundError(AppError):
    status_code = 404


class UnauthorizedError(AppError):
    status_code = 401


class ValidationError(AppError):
    status_code = 400


class StorageError(AppError):
    """Transaction hoặc kết nối tới database thất bại."""
    status_code = 500
