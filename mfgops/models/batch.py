import enum

from sqlalchemy import JSON, Column, Date, DateTime, Enum, String, Text
from sqlalchemy.sql import func

from mfgops.core.database import Base
from mfgops.models.common import enum_values, generate_custom_id


class BatchStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProductionBatch(Base):
    """
    A production run.
    items: [{"product_id", "variants": [{"variant_id", "total_fill_quantity", "fill_unit"}]}]
    total_fill_quantity is the aggregate amount for that variant in this run, in kg or L.
    """

    __tablename__ = "production_batches"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("BAT"))
    batch_name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    status = Column(Enum(BatchStatus, values_callable=enum_values), nullable=False, default=BatchStatus.DRAFT)
    items = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
