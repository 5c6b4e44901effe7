from sqlalchemy import Column, Integer, String, Date, Boolean
from app.database import Base

class PublicHoliday(Base):
    __tablename__ = "public_holidays"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    date = Column(Date, nullable=False, index=True)
    region = Column(String(10), nullable=False, index=True)  # e.g. "GB", "GB-SCT", "US"
    is_recurring = Column(Boolean, default=False, nullable=False)  # Same month/day every year
