from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from sqlalchemy.sql import func
from app.database import Base


class LeaveType(Base):
    __tablename__ = "leave_types"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False, index=True)  # Short code like "ANNUAL", "SICK"; unique among active types
    color = Column(String(20), default="#3b82f6")
    icon = Column(String(50), default="calendar")
    requires_approval = Column(Boolean, default=True, nullable=False)
    max_days_per_request = Column(Float, nullable=True)  # None = no cap
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    sort_order = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<LeaveType {self.code}: {self.name}>"
