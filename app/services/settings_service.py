from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.invitation_settings import InvitationSettings
from app.schemas.settings import PublicSettings, SettingsUpdate
from app.utils.dates import utcnow

logger = get_logger("services.settings")


class SettingsService:
    """The most recently created `invitation_settings` row is the active one."""

    def __init__(self, db: Session):
        self.db = db

    def _latest(self) -> Optional[InvitationSettings]:
        return (
            self.db.query(InvitationSettings)
            .order_by(InvitationSettings.created_at.desc(), InvitationSettings.id.desc())
            .first()
        )

    def get_or_create(self) -> InvitationSettings:
        current = self._latest()
        if current:
            return current

        try:
            current = InvitationSettings(rsvp_enabled=True, is_published=False, thank_you_page_enabled=False)
            self.db.add(current)
            self.db.commit()
            self.db.refresh(current)
            logger.info("Created default invitation settings")
            return current
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating default settings: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create default settings: {str(e)}",
            )

    def update(self, settings_data: SettingsUpdate) -> InvitationSettings:
        current = self._latest()
        if not current:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Settings not found")

        try:
            for field, value in settings_data.model_dump().items():
                setattr(current, field, value)
            current.updated_at = utcnow()
            self.db.commit()
            self.db.refresh(current)
            logger.info(f"Settings {current.id} updated (published={current.is_published})")
            return current
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating settings: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to update settings: {str(e)}",
            )

    def get_public(self) -> PublicSettings:
        current = self._latest()
        if not current:
            return PublicSettings()
        return PublicSettings.model_validate(current)
