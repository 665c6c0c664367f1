"""
System settings store.

Values are kept as JSON text. Writes encode, reads decode; a stored value that
isn't valid JSON is handed back as the raw string.
"""
import json
from typing import Any, Dict, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.audit.models import AuditTargetType
from app.features.audit.recorder import log_action
from app.features.permissions.dependencies import require_super_admin
from app.features.settings.models import SystemSetting, SettingCategory
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


def encode_value(value: Any) -> str:
    return json.dumps(value)


def decode_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


async def update_system_setting(
    db: AsyncSession,
    admin: Optional[User],
    key: str,
    value: Any,
    description: Optional[str] = None,
    category: Optional[SettingCategory] = None,
    is_public: Optional[bool] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """
    Create or replace a setting.

    The key is the identity: an existing row keeps its id and gets the new value.
    description, category and is_public are only written when given. One audit
    record follows a successful write.
    """
    admin = require_super_admin(admin)

    try:
        result = await db.execute(select(SystemSetting).where(SystemSetting.key == key))
        setting = result.scalar_one_or_none()

        if setting is None:
            setting = SystemSetting(
                key=key,
                value=encode_value(value),
                description=description,
                category=category or SettingCategory.GENERAL,
                is_public=bool(is_public),
                updated_by=admin.id,
            )
            db.add(setting)
        else:
            setting.value = encode_value(value)
            setting.updated_by = admin.id
            if description is not None:
                setting.description = description
            if category is not None:
                setting.category = category
            if is_public is not None:
                setting.is_public = is_public

        await db.commit()
    except SQLAlchemyError:
        log.exception("Error updating system setting %s", key)
        await db.rollback()
        return False

    await log_action(
        db,
        admin,
        "update_system_setting",
        AuditTargetType.SYSTEM,
        key,
        {"key": key, "value": value, "description": description},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return True


async def get_system_settings(db: AsyncSession, admin: Optional[User]) -> Optional[Dict[str, Any]]:
    """
    All settings as {key: decoded value}, in category order.

    Returns None if the store could not be read.
    """
    require_super_admin(admin)

    try:
        result = await db.execute(
            select(SystemSetting).order_by(SystemSetting.category, SystemSetting.key)
        )
        settings = result.scalars().all()
    except SQLAlchemyError:
        log.exception("Error fetching system settings")
        return None

    return {setting.key: decode_value(setting.value) for setting in settings}


async def get_public_settings(db: AsyncSession) -> Dict[str, Any]:
    """Settings flagged public, for unauthenticated clients. Empty on failure."""
    try:
        result = await db.execute(
            select(SystemSetting)
            .where(SystemSetting.is_public.is_(True))
            .order_by(SystemSetting.category, SystemSetting.key)
        )
        settings = result.scalars().all()
    except SQLAlchemyError:
        log.exception("Error fetching public settings")
        return {}

    return {setting.key: decode_value(setting.value) for setting in settings}
