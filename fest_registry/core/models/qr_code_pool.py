"""
Global pool of pre-generated QR codes. Shared by all colleges; only ever shrinks.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String

from fest_registry.db.session import Base


class QrCodePoolEntry(Base):
    __tablename__ = "qr_code_pool"
    __table_args__ = (
        # Reservation scans unused entries in id order
        Index("ix_qr_code_pool_is_used_id", "is_used", "id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    qr_code = Column(String(100), unique=True, nullable=False)
    # false -> true once, in the same transaction that sets assigned_to_person_id
    is_used = Column(Boolean, nullable=False, default=False)
    assigned_to_person_id = Column(
        Integer,
        ForeignKey("final_event_participants.id", ondelete="RESTRICT"),
        unique=True,
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
