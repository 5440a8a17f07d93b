from utils.timestamp import now_micros, now_millis, format_timestamp
from internal.errors import BaseSimError, InvalidGeometryError, StorageError, HealthCheckError

__all__ = [
    "now_micros",
    "now_millis",
    "format_timestamp",
    "BaseSimError",
    "InvalidGeometryError",
    "StorageError",
    "HealthCheckError",
]
