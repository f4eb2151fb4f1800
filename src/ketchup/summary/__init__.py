"""Summary layer: reconcilable statistics over a collection result."""

from ketchup.summary.aggregator import summarize
from ketchup.summary.models import SummaryStats

__all__ = [
    "SummaryStats",
    "summarize",
]
