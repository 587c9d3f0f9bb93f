"""
This package contains the database models for the application.
"""

from meetlink.models.base import Base
from meetlink.models.kv_entry import KVEntry

__all__ = ['Base', 'KVEntry']
