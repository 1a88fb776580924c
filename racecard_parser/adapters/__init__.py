"""
Importing this package registers every adapter in sources.ADAPTERS.
"""

from .base import BaseAdapter
from .sportsbet import SportsbetAdapter

__all__ = ["BaseAdapter", "SportsbetAdapter"]
