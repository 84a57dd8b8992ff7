"""cavectl CLI - Command-line interface for cavectl

This package provides the CLI commands for cavectl.
It depends on cavectl-core for all business logic.
"""

from cavectl_core import __version__

__all__ = ["__version__"]
