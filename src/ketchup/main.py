"""CLI entrypoint for ketchup."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from ketchup import __version__
from ketchup.collection import ClusterClient
from ketchup.config import get_settings
from ketchup.errors import ClientError, FatalDiscoveryError
from ketchup.output import OutputWriter
from ketchup.policy import CollectionPolicy
from ketchup.runner import print_result, run_collection

logger = logging.getLogger("ketchup")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ketchup",
        description=(
            "Collects all Kubernetes resources needed to recreate a cluster setup. "
            "By default, resources are sanitized for kubectl apply readiness."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--kubeconfig", "-k", type=Path, default=None, help="Path to kubeconfig file (required)")
    parser.add_argument("--context", default=None, help="Kubernetes context to use")
    parser.add_argument(
        "--namespaces",
        "-n",
        default=None,
        help="Namespaces to collect from (comma-separated, default: all namespaces)",
    )
    parser.add_argument("--output", "-o", type=Path, default=None, help="Output directory (default: /tmp)")
    parser.add_argument("--format", "-f", choices=["json", "yaml", "both"], default=None, help="Output format")
    parser.add_argument(
        "--compression",
        "-c",
        choices=["compressed", "uncompressed", "both"],
        default=None,
        help="Archive the output directory as tar.gz",
    )
    parser.add_argument("--include-secrets", "-s", action="store_true", help="Include Secrets")
    parser.add_argument(
        "--include-custom-resources",
        "-C",
        action="store_true",
        help="Include Custom Resource instances (may show API errors)",
    )
    parser.add_argument("--include-events", "-E", action="store_true", help="Include Events (high volume)")
    parser.add_argument(
        "--include-replicasets",
        "-R",
        action="store_true",
        help="Include ReplicaSets (redundant with Deployments)",
    )
    parser.add_argument(
        "--include-endpoints",
        "-P",
        action="store_true",
        help="Include Endpoints/EndpointSlices (redundant with Services)",
    )
    parser.add_argument("--include-leases", "-L", action="store_true", help="Include Leases (high churn)")
    parser.add_argument(
        "--crds",
        default=None,
        help="Collect instances of these CRDs only (comma-separated, e.g. widgets.example.com)",
    )
    parser.add_argument(
        "--raw",
        "-r",
        action="store_true",
        help="Collect raw unsanitized resources",
    )
    parser.add_argument("--workers", "-w", type=int, default=None, help="Concurrent list calls (default: 8)")
    parser.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds (default: 30)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging (progress and summaries)")
    parser.add_argument("--debug", "-d", action="store_true", help="Debug logging (includes HTTP requests)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def _setup_logging(verbose: bool, debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=debug)],
    )
    if debug:
        logger.setLevel(logging.DEBUG)
    elif verbose:
        logger.setLevel(logging.INFO)
    else:
        logger.setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the ketchup CLI."""
    args = _parse_args(argv)
    _setup_logging(args.verbose, args.debug)

    # Everything is validated before the first request to the cluster
    try:
        settings = get_settings(
            kubeconfig=args.kubeconfig,
            context=args.context,
            max_workers=args.workers,
            request_timeout_seconds=args.timeout,
            output_dir=args.output,
            output_format=args.format,
            compression=args.compression,
        )
        policy = CollectionPolicy.from_flags(
            namespaces=args.namespaces,
            crds=args.crds,
            raw=args.raw,
            include_secrets=args.include_secrets,
            include_custom_resources=args.include_custom_resources,
            include_events=args.include_events,
            include_replicasets=args.include_replicasets,
            include_endpoints=args.include_endpoints,
            include_leases=args.include_leases,
        )
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE
    if settings.kubeconfig is None:
        print("Error: --kubeconfig is required (or set KETCHUP_KUBECONFIG)", file=sys.stderr)
        return EXIT_USAGE

    logger.info("Starting ketchup %s", __version__)
    try:
        client = ClusterClient.from_kubeconfig(
            settings.kubeconfig,
            context=settings.context,
            request_timeout=settings.request_timeout_seconds,
        )
        run = run_collection(policy, client, settings)
    except (FatalDiscoveryError, ClientError) as e:
        logger.error("Collection aborted: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL
    except KeyboardInterrupt:
        print("Interrupted before any resources were collected; nothing was written", file=sys.stderr)
        return EXIT_CANCELLED

    writer = OutputWriter(settings.output_dir, settings.output_format, settings.compression)
    run.output_path = writer.write(run.result, run.summary)
    print_result(run, Console())
    if run.cancelled:
        return EXIT_CANCELLED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
