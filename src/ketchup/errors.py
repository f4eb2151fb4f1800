"""Error taxonomy for discovery and collection."""

from __future__ import annotations


class KetchupError(Exception):
    """Base class for all ketchup errors."""


class ClientError(KetchupError):
    """A request to the Kubernetes API failed (transport, HTTP or decoding error)."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    def __str__(self) -> str:
        if self.status:
            return f"[{self.status}] {self.message}"
        return self.message


class FatalDiscoveryError(KetchupError):
    """No usable catalog could be built; the run aborts before any output."""


class PartialDiscoveryWarning(UserWarning):
    """Discovery of one API group failed; the group is left out of the catalog."""

    def __init__(self, group: str, reason: str) -> None:
        super().__init__(f"discovery of API group '{group or 'core'}' failed: {reason}")
        self.group = group
        self.reason = reason


class PerResourceCollectionError(KetchupError):
    """A single list call (one kind, optionally in one namespace) failed."""

    def __init__(self, kind: str, namespace: str | None, message: str) -> None:
        where = f" in namespace '{namespace}'" if namespace else ""
        super().__init__(f"failed to list {kind}{where}: {message}")
        self.kind = kind
        self.namespace = namespace
        self.message = message
