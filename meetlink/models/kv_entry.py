"""
Model for one entry of the keyed store.
"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func

from meetlink.models.base import Base


class KVEntry(Base):
    """
    A single key/value pair.

    Keys carry their namespace as a prefix (meeting:, token:, alias:,
    email_alias:) and values are JSON documents or plain strings.

    Attributes:
        key (str): Primary key, prefixed
        value (str): Stored value
        updated_at (datetime): Last write timestamp
    """
    __tablename__ = "kv_entries"

    key = Column(String(512), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<KVEntry {self.key}>"
