"""Output layer: serialize a collection run to files and archives."""

from ketchup.output.writer import OutputWriter, build_summary_document, object_dir

__all__ = [
    "OutputWriter",
    "build_summary_document",
    "object_dir",
]
