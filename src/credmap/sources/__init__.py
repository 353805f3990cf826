"""Source collaborators: detector host extraction and rule extraction."""

from credmap.sources.detectors import ExtractionResult, ExtractOptions, extract_detectors
from credmap.sources.rules import extract_rules

__all__ = [
    "ExtractOptions",
    "ExtractionResult",
    "extract_detectors",
    "extract_rules",
]
