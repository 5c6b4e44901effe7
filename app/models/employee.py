"""
Employee directory.
Team membership drives team size for conflict analysis and the team calendar.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from app.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(String, unique=True, index=True, nullable=False)  # Same id as the token subject
    display_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    team_id = Column(String, nullable=True, index=True)
    region = Column(String(10), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Employee {self.employee_id} ({self.team_id})>"
