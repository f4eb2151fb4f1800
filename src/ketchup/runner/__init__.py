"""Runner: orchestration of discover → filter → collect → sanitize → summarize."""

from ketchup.runner.orchestrator import RunResult, build_report, print_result, run_collection

__all__ = [
    "RunResult",
    "build_report",
    "print_result",
    "run_collection",
]
