from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from app.database import Base

class AppSetting(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, index=True, nullable=False)
    value = Column(Text, nullable=False)  # Stored as string, parsed by SettingsService
    category = Column(String(20), default="general", nullable=False)  # general, leave, approval, ai
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
