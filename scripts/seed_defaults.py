"""
Seed script to populate default system roles and platform settings.

Run this script after database initialization to create:
- Default system roles (super_admin, support_admin, billing_admin)
- Default platform settings
- Optionally, the first super admin (BOOTSTRAP_SUPER_ADMIN_EMAIL)

Existing rows are left untouched, so the script can be run repeatedly.

Usage:
    python -m scripts.seed_defaults
"""
import asyncio
import json
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config
from app.core.database.engine import get_db, init_db
from app.features.permissions.models import SystemRole
from app.features.settings.models import SystemSetting, SettingCategory
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


DEFAULT_ROLES = {
    "super_admin": {
        "description": "Full system administration access",
        "permissions": {
            "system": ["read", "write", "delete"],
            "organizations": ["read", "write", "delete", "suspend", "billing"],
            "users": ["read", "write", "delete", "impersonate"],
            "support": ["read", "write", "delete"],
            "audit": ["read"],
            "settings": ["read", "write"],
        },
    },
    "support_admin": {
        "description": "Customer support administration",
        "permissions": {
            "organizations": ["read", "suspend"],
            "users": ["read"],
            "support": ["read", "write"],
            "audit": ["read"],
        },
    },
    "billing_admin": {
        "description": "Billing and subscription management",
        "permissions": {
            "organizations": ["read", "billing"],
            "users": ["read"],
            "billing": ["read", "write"],
            "audit": ["read"],
        },
    },
}


# (key, value, description, category, is_public)
DEFAULT_SETTINGS = [
    ("max_organizations", 1000, "Maximum number of organizations allowed on the platform", SettingCategory.LIMITS, False),
    ("default_trial_days", 14, "Default trial period in days for new organizations", SettingCategory.BILLING, False),
    ("max_messages_per_day", 10000, "Maximum messages per day for free tier", SettingCategory.LIMITS, False),
    ("max_contacts_per_org", 50000, "Maximum contacts per organization", SettingCategory.LIMITS, False),
    ("maintenance_mode", False, "Enable maintenance mode for the platform", SettingCategory.GENERAL, True),
    ("signup_enabled", True, "Allow new user signups", SettingCategory.GENERAL, True),
    ("min_password_length", 8, "Minimum password length requirement", SettingCategory.SECURITY, True),
    ("support_email", "support@example.com", "Support contact email", SettingCategory.GENERAL, True),
    ("platform_name", "Admin Console", "Platform display name", SettingCategory.GENERAL, True),
    ("webhook_timeout_seconds", 30, "Webhook timeout in seconds", SettingCategory.GENERAL, False),
]


async def seed_roles(db: AsyncSession):
    log.info("Creating default system roles...")

    for role_name, role_config in DEFAULT_ROLES.items():
        result = await db.execute(select(SystemRole).where(SystemRole.name == role_name))
        if result.scalars().first():
            log.debug(f"Role '{role_name}' already exists, skipping")
            continue

        db.add(SystemRole(
            name=role_name,
            description=role_config["description"],
            permissions=role_config["permissions"],
        ))
        log.info(f"Created role '{role_name}'")

    await db.commit()


async def seed_settings(db: AsyncSession):
    log.info("Creating default settings...")

    for key, value, description, category, is_public in DEFAULT_SETTINGS:
        result = await db.execute(select(SystemSetting).where(SystemSetting.key == key))
        if result.scalars().first():
            log.debug(f"Setting '{key}' already exists, skipping")
            continue

        db.add(SystemSetting(
            key=key,
            value=json.dumps(value),
            description=description,
            category=category,
            is_public=is_public,
        ))

    await db.commit()


async def promote_super_admin(db: AsyncSession, email: str):
    """
    Flag an existing profile as super admin.

    The profile must have logged in once so it exists locally.
    """
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if user is None:
        log.warning(f"No profile with email {email}; log in once and re-run")
        return

    if not user.is_super_admin:
        user.is_super_admin = True
        await db.commit()
        log.info(f"Promoted {email} to super admin")


async def main():
    """Main function to seed roles and settings."""
    log.info("Starting seeding...")

    log.info("Initializing database tables...")
    await init_db()

    async for db in get_db():
        try:
            await seed_roles(db)
            await seed_settings(db)
            if config.BOOTSTRAP_SUPER_ADMIN_EMAIL:
                await promote_super_admin(db, config.BOOTSTRAP_SUPER_ADMIN_EMAIL)
            log.info("Seeding completed successfully!")
        except Exception as e:
            log.error(f"Error seeding defaults: {e}", exc_info=True)
            await db.rollback()
            raise

        break  # Only use first session


if __name__ == "__main__":
    asyncio.run(main())
