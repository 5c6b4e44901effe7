from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_leave_balance_employee_type_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, nullable=False, index=True)
    leave_type_id = Column(Integer, ForeignKey("leave_types.id"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    entitlement = Column(Float, default=0.0, nullable=False)
    used = Column(Float, default=0.0, nullable=False)
    pending = Column(Float, default=0.0, nullable=False)
    carry_over = Column(Float, default=0.0, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    version = Column(Integer, nullable=False)

    leave_type = relationship("LeaveType")

    __mapper_args__ = {"version_id_col": version}

    @property
    def available(self) -> float:
        """entitlement + carry_over - used - pending; may go negative on over-allocation."""
        return (self.entitlement or 0.0) + (self.carry_over or 0.0) - (self.used or 0.0) - (self.pending or 0.0)

    def __repr__(self):
        return f"<LeaveBalance {self.employee_id}/{self.leave_type_id}/{self.year}>"
