from sqlalchemy import Column, Integer, String, Date, Float, Boolean, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum

class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

# Statuses that reserve or consume balance and count as an absence for the team
ACTIVE_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)

class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, nullable=False, index=True)  # Subject claim from the identity provider
    employee_name = Column(String, nullable=True)
    employee_email = Column(String, nullable=True)
    team_id = Column(String, nullable=True, index=True)  # Snapshot of the requester's team at submission

    # Nullable only for legacy rows imported before the bracket-tag migration
    leave_type_id = Column(Integer, ForeignKey("leave_types.id"), nullable=True, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    half_day_start = Column(Boolean, default=False, nullable=False)
    half_day_end = Column(Boolean, default=False, nullable=False)
    total_days = Column(Float, nullable=False, default=0.0)
    leave_year = Column(Integer, nullable=True)  # Balance year charged at submission; null on legacy rows
    reason = Column(Text, nullable=True)
    status = Column(String, default=LeaveStatus.PENDING.value, nullable=False, index=True)  # Using String to store enum value for simplicity with SQLite

    approver_id = Column(String, nullable=True)
    approver_name = Column(String, nullable=True)
    approver_comments = Column(Text, nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Optimistic concurrency token, bumped by SQLAlchemy on every UPDATE
    version = Column(Integer, nullable=False)

    leave_type = relationship("LeaveType")

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<LeaveRequest {self.id} {self.employee_id} {self.start_date}..{self.end_date} [{self.status}]>"
