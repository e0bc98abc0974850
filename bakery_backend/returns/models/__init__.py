"""
PATH: returns/models/__init__.py

Returns models export surface.
"""

from .return_entry import Return

__all__ = [
    "Return",
]
