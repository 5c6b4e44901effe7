"""
Service providers for routers.

Each request gets services bound to its own Session, configured from the
admin-editable settings as they stand at the start of the request.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.config import settings as app_config
from app.database import get_db
from app.schemas.admin import AppSettings
from app.services.conflict_analyzer import TeamConflictService
from app.services.leave_workflow import LeaveWorkflowService
from app.services.settings_service import SettingsService, thresholds_from


def get_app_settings(db: Session = Depends(get_db)) -> AppSettings:
    return SettingsService(db).get_settings()


def get_workflow_service(
    db: Session = Depends(get_db),
    app_settings: AppSettings = Depends(get_app_settings),
) -> LeaveWorkflowService:
    return LeaveWorkflowService(db, app_settings=app_settings)


def get_conflict_service(
    db: Session = Depends(get_db),
    app_settings: AppSettings = Depends(get_app_settings),
) -> TeamConflictService:
    enabled = app_config.conflict.enabled and app_settings.ai_conflict_detection
    return TeamConflictService(db, thresholds=thresholds_from(app_settings), enabled=enabled)
