"""Write collected objects and the run summary to disk, optionally as a tar.gz archive."""

from __future__ import annotations

import json
import logging
import shutil
import tarfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

import yaml

from ketchup import __version__
from ketchup.collection.models import CollectedObject, CollectionResult
from ketchup.summary.models import SummaryStats

logger = logging.getLogger(__name__)

OutputFormat = Literal["json", "yaml", "both"]
Compression = Literal["compressed", "uncompressed", "both"]

SUMMARY_FILENAME = "collection-summary.yaml"
CLUSTER_DIRNAME = "cluster"
NAMESPACES_DIRNAME = "namespaces"


def _dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False, allow_unicode=True)


def object_dir(root: Path, obj: CollectedObject) -> Path:
    """Directory of an object: ``cluster/<kind>`` or ``namespaces/<ns>/<kind>``."""
    kind_dir = obj.kind.name.lower()
    if obj.namespace is None:
        return root / CLUSTER_DIRNAME / kind_dir
    return root / NAMESPACES_DIRNAME / obj.namespace / kind_dir


def build_summary_document(
    summary: SummaryStats,
    timestamp: datetime,
) -> dict[str, Any]:
    """Summary file contents; field names mirror SummaryStats."""
    return {
        "collection_info": {
            "timestamp": timestamp.isoformat(),
            "tool": "ketchup",
            "version": __version__,
            "sanitized": summary.sanitized,
            "cancelled": summary.cancelled,
            "optional_resources_included": sorted(summary.optional_resources_included),
        },
        "cluster_summary": {
            "total_namespaces": summary.total_namespaces,
            "total_cluster_resources": summary.total_cluster_resources,
            "total_namespaced_resources": summary.total_namespaced_resources,
            "total_resources": summary.total_resources,
            "resource_type_counts": dict(summary.resource_type_counts),
        },
        "cluster_resources": {
            "total_resources": summary.total_cluster_resources,
            "resource_types": dict(summary.cluster_resource_counts),
        },
        "namespace_details": {
            ns: {"total_resources": sum(counts.values()), "resource_types": dict(counts)}
            for ns, counts in summary.namespace_resource_counts.items()
        },
        "errors": [e.model_dump() for e in summary.errors],
    }


class OutputWriter:
    """Lays out one collection run under a timestamped directory."""

    def __init__(
        self,
        base_dir: str | Path,
        output_format: OutputFormat = "yaml",
        compression: Compression = "compressed",
        timestamp: datetime | None = None,
    ) -> None:
        if output_format not in ("json", "yaml", "both"):
            raise ValueError(f"Invalid format: {output_format}")
        if compression not in ("compressed", "uncompressed", "both"):
            raise ValueError(f"Invalid compression: {compression}. Use compressed, uncompressed, or both")
        self.base_dir = Path(base_dir)
        self.output_format = output_format
        self.compression = compression
        self.timestamp = timestamp or datetime.now(timezone.utc)

    @property
    def output_dir(self) -> Path:
        return self.base_dir / f"ketchup-{self.timestamp.strftime('%Y-%m-%d-%H-%M-%S')}"

    def write(self, result: CollectionResult, summary: SummaryStats) -> Path:
        """Write every object and the summary; return the archive path or the directory."""
        root = self.output_dir
        logger.info("Creating output directory: %s", root)
        root.mkdir(parents=True, exist_ok=True)

        saved = 0
        for obj in result.objects:
            saved += self._write_object(root, obj)
        logger.info("Saved %d resources", saved)

        summary_path = root / SUMMARY_FILENAME
        logger.info("Creating collection summary: %s", summary_path)
        summary_path.write_text(_dump_yaml(build_summary_document(summary, self.timestamp)), encoding="utf-8")

        if self.compression == "uncompressed":
            return root
        archive = self._create_archive(root)
        if self.compression == "compressed":
            shutil.rmtree(root)
        return archive

    def _write_object(self, root: Path, obj: CollectedObject) -> int:
        if not obj.name:
            where = f" in namespace {obj.namespace}" if obj.namespace else ""
            logger.warning(
                "Not writing %s object without a name%s; it is still counted in the summary",
                obj.kind.name,
                where,
            )
            return 0
        target = object_dir(root, obj)
        target.mkdir(parents=True, exist_ok=True)
        if self.output_format in ("yaml", "both"):
            (target / f"{obj.name}.yaml").write_text(_dump_yaml(obj.body), encoding="utf-8")
        if self.output_format in ("json", "both"):
            (target / f"{obj.name}.json").write_text(json.dumps(obj.body, indent=2), encoding="utf-8")
        return 1

    def _create_archive(self, root: Path) -> Path:
        archive = root.with_name(f"{root.name}.tar.gz")
        logger.info("Creating compressed archive: %s", archive)
        with tarfile.open(archive, "w:gz") as tar:
            tar.add(root, arcname=root.name)
        return archive
