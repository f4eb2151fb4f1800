"""Catalog of resource kinds discovered from the API server."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ketchup.errors import PartialDiscoveryWarning


class Scope(str, Enum):
    """Where instances of a kind live."""

    CLUSTER = "Cluster"
    NAMESPACED = "Namespaced"


class ResourceKind(BaseModel):
    """A listable resource type (group/version/kind plus the plural used in URLs)."""

    model_config = ConfigDict(frozen=True)

    group: str = Field(default="", description="API group; empty for the core group")
    version: str
    kind: str
    plural: str
    scope: Scope
    is_custom_resource: bool = False

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def name(self) -> str:
        """Display key: ``Pod`` for the core group, ``Deployment.apps`` otherwise."""
        return f"{self.kind}.{self.group}" if self.group else self.kind

    @property
    def crd_name(self) -> str:
        """Name of the backing CustomResourceDefinition, e.g. ``widgets.example.com``."""
        return f"{self.plural}.{self.group}" if self.group else self.plural

    @property
    def namespaced(self) -> bool:
        return self.scope == Scope.NAMESPACED

    @property
    def key(self) -> tuple[str, str]:
        return (self.group, self.kind)


@dataclass(frozen=True)
class Catalog:
    """Resource kinds discovered for one run, unique per (group, kind)."""

    kinds: frozenset[ResourceKind] = frozenset()
    warnings: tuple[PartialDiscoveryWarning, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.kinds)

    def __iter__(self):
        return iter(self.kinds)

    def __contains__(self, item: object) -> bool:
        return item in self.kinds

    @property
    def custom_resources(self) -> frozenset[ResourceKind]:
        return frozenset(k for k in self.kinds if k.is_custom_resource)

    def find(self, group: str, kind: str) -> ResourceKind | None:
        for k in self.kinds:
            if k.key == (group, kind):
                return k
        return None
