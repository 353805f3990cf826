"""
CLI commands for credmap.
"""

from credmap.cli.export import export_command
from credmap.cli.keyword import keyword_derive_command, keyword_resolve_command

__all__ = [
    "export_command",
    "keyword_derive_command",
    "keyword_resolve_command",
]
