"""Ketchup: collect every Kubernetes configuration resource needed to recreate a cluster."""

__version__ = "0.3.0"
