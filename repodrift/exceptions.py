"""Exception hierarchy for repodrift."""

from typing import Dict, Optional


class RepoDriftError(Exception):
    """Base exception for all repodrift errors."""

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(RepoDriftError):
    """Invalid or unreadable configuration."""


class StorageError(RepoDriftError):
    """Failure in the persistence layer."""


class RecordNotFoundError(StorageError):
    """A drift record or snapshot id does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found", {"id": record_id})
        self.kind = kind
        self.record_id = record_id


class InvalidTransitionError(StorageError):
    """A drift record was moved out of a terminal state."""

    def __init__(self, record_id: str, current: str, target: str):
        super().__init__(
            "Drift record is already finished",
            {"id": record_id, "status": current, "requested": target},
        )


class NoBaselineError(RepoDriftError):
    """A project has no snapshot to compare against."""

    def __init__(self, project_id: str):
        super().__init__(
            "No snapshots found; capture a snapshot before detecting drift",
            {"project": project_id},
        )
        self.project_id = project_id
