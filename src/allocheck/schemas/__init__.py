from allocheck.schemas.models import (
    TABLES,
    Client,
    Config,
    ErrorKind,
    Task,
    ValidationError,
    Worker,
)

__all__ = ["TABLES", "Client", "Config", "ErrorKind", "Task", "ValidationError", "Worker"]
