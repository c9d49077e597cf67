from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import generate_custom_id


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(String(20), primary_key=True,
                default=lambda: generate_custom_id("SUP"))
    name = Column(String(200), nullable=False)
    contact_persons = Column(JSON, nullable=False, default=list)
    address = Column(String(500), nullable=True)
    rating = Column(Float, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    payment_terms = Column(String(200), nullable=True)
    lead_time = Column(Integer, nullable=True)  # days
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True),
                        server_default=func.now(), onupdate=func.now())
