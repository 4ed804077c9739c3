from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func
from stride_pulse.db import Base


class Blob(Base):
    __tablename__ = "blobs"

    # Logical key, e.g. "stride_pulse_stats_v7"
    key = Column(String(64), primary_key=True)

    # Serialized JSON document
    value = Column(Text, nullable=False)

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
