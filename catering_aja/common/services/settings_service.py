from typing import Dict

from ..db.session import get_session
from ..errors import NotFoundError, ValidationFailed
from ..models import SITE_SETTINGS_ID, SiteSettings
from ..schemas import SiteSettingsUpdate
from ..utils.dto import to_settings_dto


class SiteSettingsService:
    """Reads and upserts the singleton site settings row."""

    def __init__(self, session_factory=get_session):
        self._session_factory = session_factory

    def get_settings(self) -> Dict:
        with self._session_factory() as session:
            row = session.get(SiteSettings, SITE_SETTINGS_ID)
            if row is None:
                raise NotFoundError("Settings not found")
            return to_settings_dto(row)

    def update_settings(self, data: SiteSettingsUpdate) -> Dict:
        changes = data.model_dump(exclude_unset=True)
        for key in ("site_name", "title", "promo_banner_enabled"):
            if key in changes and changes[key] is None:
                del changes[key]
        if not changes:
            raise ValidationFailed("No fields to update.")
        with self._session_factory() as session:
            row = session.get(SiteSettings, SITE_SETTINGS_ID)
            if row is None:
                row = SiteSettings(id=SITE_SETTINGS_ID)
                session.add(row)
            for key, value in changes.items():
                setattr(row, key, value)
            session.flush()
            return to_settings_dto(row)
