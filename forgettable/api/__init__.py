"""
Public API for forgettable.
"""

from forgettable.api.table import Table

__all__ = ["Table"]
