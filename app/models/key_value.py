from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from ..core.database import Base

class KeyValue(Base):
    __tablename__ = "key_values"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<KeyValue(key='{self.key}', size={len(self.value or '')})>"
