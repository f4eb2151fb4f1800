"""Collected objects and the result of a collection run."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ketchup.discovery.models import ResourceKind
from ketchup.policy.models import CollectionPolicy


class CollectedObject(BaseModel):
    """One resource as returned by the API server, kept as an opaque document."""

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    namespace: str | None = None
    name: str
    body: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_namespace(self) -> CollectedObject:
        if self.kind.namespaced and not self.namespace:
            raise ValueError(f"{self.kind.name} '{self.name}' is namespaced but has no namespace")
        if not self.kind.namespaced and self.namespace:
            raise ValueError(f"{self.kind.name} '{self.name}' is cluster-scoped but has namespace {self.namespace}")
        return self


class CollectionErrorEntry(BaseModel):
    """A failed list call: one kind, optionally in one namespace."""

    kind: str
    api_version: str = ""
    namespace: str | None = None
    message: str


class CollectionResult(BaseModel):
    """Everything gathered by one run of the collector."""

    objects: list[CollectedObject] = Field(default_factory=list)
    errors: list[CollectionErrorEntry] = Field(default_factory=list)
    cancelled: bool = False
    namespaces: list[str] = Field(
        default_factory=list,
        description="Namespaces visited by at least one completed list call",
    )
    policy: CollectionPolicy = Field(default_factory=CollectionPolicy)
