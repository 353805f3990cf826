"""
credmap - reconcile credential detector hosts with secret-matching rules.

Builds a single service catalog keyed by a normalized service keyword from
two independently maintained sources: per-service verification hosts and
per-service value-matching regex rules.
"""

__version__ = "0.1.0"
