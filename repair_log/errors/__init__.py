from .exceptions import (
    AppError,
    ValidationError,
    NotFound,
    PersistenceError,
    AssetError,
    EmptyExportError,
)
from .handlers import register_error_handlers
