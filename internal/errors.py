"""Error types carrying a tracking id and timestamp."""

import uuid

from utils.timestamp import format_timestamp


class BaseSimError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.error_id = uuid.uuid4().hex
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"


class InvalidGeometryError(BaseSimError, ValueError):
    """Non-finite coordinates or non-positive sizes handed to the simulation."""

    def __init__(self, message, field=None, value=None, **kwargs):
        context = kwargs.pop("context", {})
        if field:
            context["field"] = field
            context["value"] = value
        super().__init__(message, context=context, **kwargs)


class StorageError(BaseSimError):
    """Preference store read/write failures."""

    def __init__(self, message, path=None, **kwargs):
        context = kwargs.pop("context", {})
        if path:
            context["path"] = str(path)
        super().__init__(message, context=context, **kwargs)


class HealthCheckError(BaseSimError):
    """Health check failures."""

    def __init__(self, message, component=None, **kwargs):
        context = kwargs.pop("context", {})
        if component:
            context["component"] = component
        super().__init__(message, context=context, **kwargs)
