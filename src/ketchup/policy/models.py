"""Collection policy and the filtered catalog it produces."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ketchup.discovery.models import ResourceKind


def _split_csv(value: str | None) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


class CollectionPolicy(BaseModel):
    """What to collect and how. Immutable once built from validated flags."""

    model_config = ConfigDict(frozen=True)

    namespace_filter: frozenset[str] = Field(
        default_factory=frozenset,
        description="Namespaces to visit; empty means every namespace in the cluster",
    )
    include_secrets: bool = False
    include_custom_resources: bool = False
    include_events: bool = False
    include_replicasets: bool = False
    include_endpoints: bool = False
    include_leases: bool = False
    specific_crds: frozenset[str] = Field(
        default_factory=frozenset,
        description="CRD names (plural.group) to collect; overrides include_custom_resources",
    )
    sanitize: bool = True

    @field_validator("namespace_filter", "specific_crds", mode="before")
    @classmethod
    def _normalize_names(cls, value: object) -> object:
        if isinstance(value, str):
            return _split_csv(value)
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(v).strip() for v in value if str(v).strip())
        return value

    @classmethod
    def from_flags(
        cls,
        namespaces: str | None = None,
        crds: str | None = None,
        raw: bool = False,
        **flags: bool,
    ) -> CollectionPolicy:
        """Build a policy from CLI-style comma-separated strings and boolean flags."""
        return cls(
            namespace_filter=_split_csv(namespaces),
            specific_crds=_split_csv(crds),
            sanitize=not raw,
            **flags,
        )

    def optional_resources_included(self) -> frozenset[str]:
        """Labels of the opt-in resource groups this policy enables."""
        included = {
            label
            for label, enabled in (
                ("secrets", self.include_secrets),
                ("custom_resources", self.include_custom_resources and not self.specific_crds),
                ("events", self.include_events),
                ("replicasets", self.include_replicasets),
                ("endpoints", self.include_endpoints),
                ("leases", self.include_leases),
            )
            if enabled
        }
        included.update(f"crd:{name}" for name in self.specific_crds)
        return frozenset(included)


@dataclass(frozen=True)
class FilteredCatalog:
    """The kinds selected for collection. A set: consumers must not rely on order."""

    kinds: frozenset[ResourceKind]
    namespace_filter: frozenset[str] = frozenset()

    def __len__(self) -> int:
        return len(self.kinds)

    def __iter__(self):
        return iter(self.kinds)

    def __contains__(self, item: object) -> bool:
        return item in self.kinds

    @property
    def cluster_kinds(self) -> frozenset[ResourceKind]:
        return frozenset(k for k in self.kinds if not k.namespaced)

    @property
    def namespaced_kinds(self) -> frozenset[ResourceKind]:
        return frozenset(k for k in self.kinds if k.namespaced)
