class AppError(Exception):
    """Base application exception."""

    status = 500

    def __init__(self, message: str, code: str = "APP_ERROR", status: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        if status is not None:
            self.status = status


class ValidationError(AppError):
    """Bad or missing input; the client can fix it."""

    status = 400

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFound(AppError):
    status = 404

    def __init__(self, message: str = "Repair not found."):
        super().__init__(message, code="NOT_FOUND")


class PersistenceError(AppError):
    """Record store unreachable, unreadable or corrupt."""

    def __init__(self, message: str):
        super().__init__(message, code="PERSISTENCE_ERROR")


class AssetError(AppError):
    """Image file could not be written or removed."""

    def __init__(self, message: str):
        super().__init__(message, code="ASSET_ERROR")


class EmptyExportError(AppError):
    status = 404

    def __init__(self, message: str = "Nothing to export."):
        super().__init__(message, code="EMPTY_EXPORT")
