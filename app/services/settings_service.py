import json
from typing import Dict

from sqlalchemy.orm import Session

from app.core.config import Config, settings as app_config
from app.core.exceptions import PolicyViolationError
from app.models.app_setting import AppSetting
from app.schemas.admin import AppSettings, AppSettingsUpdate
from app.services.base import BaseService
from app.services.conflict_analyzer import ConflictThresholds

SETTING_CATEGORIES: Dict[str, str] = {
    "app_name": "general",
    "default_region": "general",
    "default_annual_entitlement": "leave",
    "financial_year_start": "leave",
    "allow_carry_over": "leave",
    "max_carry_over_days": "leave",
    "approval_required": "approval",
    "allow_self_approval": "approval",
    "ai_conflict_detection": "ai",
    "conflict_warning_threshold": "ai",
    "conflict_critical_threshold": "ai",
}


def default_settings(config: Config = app_config) -> Dict[str, object]:
    return {
        "app_name": config.app_name,
        "default_region": config.leave.default_region,
        "default_annual_entitlement": config.leave.default_annual_entitlement,
        "financial_year_start": config.leave.financial_year_start,
        "allow_carry_over": config.leave.allow_carry_over,
        "max_carry_over_days": config.leave.max_carry_over_days,
        "approval_required": True,
        "allow_self_approval": False,
        "ai_conflict_detection": config.conflict.enabled,
        "conflict_warning_threshold": config.conflict.warning_percent,
        "conflict_critical_threshold": config.conflict.critical_percent,
    }


def _encode(value) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def thresholds_from(app_settings: AppSettings) -> ConflictThresholds:
    return ConflictThresholds(
        warning_percent=app_settings.conflict_warning_threshold,
        critical_percent=app_settings.conflict_critical_threshold,
    )


class SettingsService(BaseService):
    """
    Admin-editable settings stored as key/value rows.
    Missing keys fall back to the process configuration.
    """

    def __init__(self, db: Session, config: Config = app_config):
        super().__init__(db)
        self.config = config

    def overrides(self) -> Dict[str, str]:
        rows = self.db.query(AppSetting).filter(AppSetting.key.in_(list(SETTING_CATEGORIES))).all()
        return {row.key: row.value for row in rows}

    def get_settings(self) -> AppSettings:
        values = default_settings(self.config)
        values.update(self.overrides())
        return AppSettings.model_validate(values)

    def update_settings(self, update: AppSettingsUpdate) -> AppSettings:
        changes = update.model_dump(exclude_unset=True, exclude_none=True)

        # Validate the merged result before writing anything
        merged = self.get_settings().model_dump()
        merged.update(changes)
        result = AppSettings.model_validate(merged)
        if result.conflict_warning_threshold > result.conflict_critical_threshold:
            raise PolicyViolationError(
                "conflict_warning_threshold must not exceed conflict_critical_threshold",
                details={
                    "conflict_warning_threshold": result.conflict_warning_threshold,
                    "conflict_critical_threshold": result.conflict_critical_threshold,
                },
            )

        with self.transaction():
            for key, value in changes.items():
                row = self.db.query(AppSetting).filter(AppSetting.key == key).first()
                if row is None:
                    row = AppSetting(key=key, category=SETTING_CATEGORIES[key])
                    self.db.add(row)
                row.value = _encode(value)

        self._logger.info(f"Updated settings: {sorted(changes)}")
        return result

    def conflict_thresholds(self) -> ConflictThresholds:
        return thresholds_from(self.get_settings())
