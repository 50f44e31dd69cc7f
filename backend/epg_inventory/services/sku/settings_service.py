"""Process-wide auto-generation toggle."""

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from epg_inventory.config import settings
from epg_inventory.models.base import utc_now
from epg_inventory.models.system_setting import DISABLE_AUTO_SKU_GENERATION_KEY, SystemSetting

logger = structlog.get_logger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


@dataclass(frozen=True)
class AutoGenerationStatus:
    """Effective auto-generation state."""

    enabled: bool
    stored_enabled: bool
    forced_by_environment: bool


class AutoGenerationSettings:
    """Reads and writes the auto-generation flag.

    The flag lives in system_settings so every worker process sees the same
    value. DISABLE_AUTO_SKU_GENERATION in the environment overrides it.
    """

    def __init__(self, session: AsyncSession, *, env_disabled: bool | None = None):
        self.session = session
        self.env_disabled = settings.disable_auto_sku_generation if env_disabled is None else env_disabled

    async def _stored_enabled(self) -> bool:
        setting = await self.session.get(SystemSetting, DISABLE_AUTO_SKU_GENERATION_KEY, populate_existing=True)
        if setting is None:
            return True
        return setting.value.strip().lower() not in _TRUE_VALUES

    async def status(self) -> AutoGenerationStatus:
        stored_enabled = await self._stored_enabled()
        return AutoGenerationStatus(
            enabled=stored_enabled and not self.env_disabled,
            stored_enabled=stored_enabled,
            forced_by_environment=self.env_disabled,
        )

    async def is_enabled(self) -> bool:
        return (await self.status()).enabled

    async def set_enabled(self, enabled: bool) -> AutoGenerationStatus:
        """Persist the toggle and return the resulting effective state."""
        value = "false" if enabled else "true"  # stored as the "disable" flag
        try:
            setting = await self.session.get(SystemSetting, DISABLE_AUTO_SKU_GENERATION_KEY)
            if setting is None:
                setting = SystemSetting(
                    key=DISABLE_AUTO_SKU_GENERATION_KEY,
                    value=value,
                    description="Disable automatic SKU generation for new equipment instances",
                )
                self.session.add(setting)
            else:
                setting.value = value
                setting.updated_at = utc_now()
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            raise

        logger.info("Auto SKU generation toggled", enabled=enabled, forced_off_by_environment=self.env_disabled)
        return await self.status()
