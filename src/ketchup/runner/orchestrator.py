"""Orchestrator: discover → filter → collect → sanitize → summarize."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from ketchup.collection import ClusterClient, CollectionResult, Collector, sanitize_result
from ketchup.config import Settings, get_settings
from ketchup.discovery import Catalog, discover
from ketchup.policy import CollectionPolicy, FilteredCatalog, filter_catalog
from ketchup.runner.templates import (
    REPORT_CANCELLED,
    REPORT_HEADER,
    REPORT_SECTION_DISCOVERY,
    REPORT_SECTION_ERRORS,
    REPORT_SECTION_OUTPUT,
    REPORT_SECTION_TOTALS,
)
from ketchup.summary import SummaryStats, summarize

logger = logging.getLogger(__name__)

_OPTIONAL_FLAGS = (
    ("Secrets", "include_secrets", "-s"),
    ("Events", "include_events", "-E"),
    ("ReplicaSets", "include_replicasets", "-R"),
    ("Endpoints", "include_endpoints", "-P"),
    ("Leases", "include_leases", "-L"),
)


@dataclass
class RunResult:
    """Result of a full collection run."""

    catalog: Catalog
    filtered: FilteredCatalog
    result: CollectionResult
    summary: SummaryStats
    output_path: Path | None = None

    @property
    def cancelled(self) -> bool:
        return self.result.cancelled


def log_collection_plan(policy: CollectionPolicy) -> None:
    """Log which optional resource groups will be collected."""
    logger.info("Collection plan:")
    logger.info("  - Core resources: always collected")
    for label, flag, switch in _OPTIONAL_FLAGS:
        if getattr(policy, flag):
            logger.info("  - %s: enabled", label)
        else:
            logger.debug("  - %s: skipped (use %s to enable)", label, switch)
    if policy.specific_crds:
        logger.info("  - Custom Resources: specific CRDs %s", sorted(policy.specific_crds))
    elif policy.include_custom_resources:
        logger.info("  - Custom Resources: enabled")
    else:
        logger.debug("  - Custom Resources: skipped (use -C or --crds to enable)")
    if policy.sanitize:
        logger.info("Resources will be sanitized for kubectl apply readiness (use --raw to disable)")


def run_collection(
    policy: CollectionPolicy,
    client: ClusterClient,
    settings: Settings | None = None,
    collector: Collector | None = None,
) -> RunResult:
    """
    Run the pipeline against one cluster. Raises FatalDiscoveryError when no catalog can be built;
    per-resource failures are carried in the result instead.
    """
    opts = settings or get_settings()
    log_collection_plan(policy)

    catalog = discover(client)
    filtered = filter_catalog(catalog, policy)

    collector = collector or Collector(
        client,
        max_workers=opts.max_workers,
        page_size=opts.page_size,
        request_timeout=opts.request_timeout_seconds,
    )
    result = collector.collect(filtered, policy)
    result = sanitize_result(result)
    summary = summarize(result)
    logger.info(
        "Collected %d resources (%d cluster-scoped, %d namespaced) with %d errors",
        summary.total_resources,
        summary.total_cluster_resources,
        summary.total_namespaced_resources,
        len(summary.errors),
    )
    return RunResult(catalog=catalog, filtered=filtered, result=result, summary=summary)


def build_report(run: RunResult) -> str:
    summary = run.summary
    parts = [REPORT_HEADER]
    if run.cancelled:
        parts.append(REPORT_CANCELLED)
    parts.append(
        REPORT_SECTION_TOTALS.format(
            total_namespaces=summary.total_namespaces,
            total_cluster_resources=summary.total_cluster_resources,
            total_namespaced_resources=summary.total_namespaced_resources,
            total_resources=summary.total_resources,
            sanitized="yes" if summary.sanitized else "no (raw)",
            optional=", ".join(sorted(summary.optional_resources_included)) or "none",
        )
    )
    if run.catalog.warnings:
        parts.append(
            REPORT_SECTION_DISCOVERY.format(warnings="\n".join(f"- {w}" for w in run.catalog.warnings))
        )
    if summary.errors:
        errors_text = "\n".join(
            f"- **{e.kind}**{f' in `{e.namespace}`' if e.namespace else ''}: {e.message}"
            for e in summary.errors
        )
        parts.append(REPORT_SECTION_ERRORS.format(count=len(summary.errors), errors=errors_text))
    if run.output_path is not None:
        parts.append(REPORT_SECTION_OUTPUT.format(path=run.output_path))
    return "\n".join(parts)


def print_result(run: RunResult, console: Console | None = None) -> None:
    """Print the run report to console using Rich."""
    c = console or Console()
    border = "yellow" if run.cancelled or run.summary.errors else "green"
    c.print(Panel(Markdown(build_report(run)), title="Ketchup", border_style=border))
