import csv
import io
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from fastapi import HTTPException, UploadFile, status
from pydantic import ValidationError
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.logging import get_logger
from app.models.analytics_event import EVENT_RSVP_ACTION_SUCCESS
from app.models.invitation import Invitation
from app.schemas.invitation import InvitationCreate, InvitationUpdate
from app.services.analytics_service import log_event, view_count_subquery
from app.utils.dates import format_local_full, resolve_timezone, utcnow
from app.utils.pagination import build_pagination, offset_for

logger = get_logger("services.invitation")

EXPORT_HEADERS = [
    "ID",
    "Nombre",
    "Apellido",
    "Slug",
    "Número de Pases",
    "Estado",
    "Vistas",
    "Fecha de Creación",
    "Última Actualización",
]

IMPORT_REQUIRED_COLUMNS = ("name", "lastname", "slug")
IMPORT_OPTIONAL_COLUMNS = ("number_of_passes", "secondary_name", "secondary_lastname")


def export_status_label(invitation: Invitation) -> str:
    if not invitation.is_active:
        return "Inactiva"
    return "Confirmada" if invitation.is_confirmed else "Pendiente"


def invitation_to_dict(invitation: Invitation, view_count: int = 0) -> Dict[str, Any]:
    return {
        "id": invitation.id,
        "slug": invitation.slug,
        "name": invitation.name,
        "lastname": invitation.lastname,
        "secondary_name": invitation.secondary_name,
        "secondary_lastname": invitation.secondary_lastname,
        "number_of_passes": invitation.number_of_passes,
        "is_confirmed": invitation.is_confirmed,
        "is_active": invitation.is_active,
        "view_count": view_count or 0,
        "created_at": invitation.created_at,
        "updated_at": invitation.updated_at,
    }


class InvitationService:
    def __init__(self, db: Session):
        self.db = db

    def _with_view_counts(self):
        views = view_count_subquery(self.db)
        return (
            self.db.query(Invitation, func.coalesce(views.c.view_count, 0).label("view_count"))
            .outerjoin(views, views.c.invitation_id == Invitation.id)
        )

    def _get_or_404(self, invitation_id: int) -> Invitation:
        invitation = self.db.query(Invitation).filter(Invitation.id == invitation_id).first()
        if not invitation:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Invitation with ID {invitation_id} not found",
            )
        return invitation

    def _ensure_slug_available(self, slug: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(Invitation.id).filter(Invitation.slug == slug)
        if exclude_id is not None:
            query = query.filter(Invitation.id != exclude_id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"An invitation with slug '{slug}' already exists",
            )

    def list_invitations(self, page: int = 1, limit: int = 20) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """Paginated invitations, newest first, with derived view counts"""
        total = self.db.query(func.count(Invitation.id)).scalar() or 0
        rows = (
            self._with_view_counts()
            .order_by(Invitation.created_at.desc(), Invitation.id.desc())
            .offset(offset_for(page, limit))
            .limit(limit)
            .all()
        )
        invitations = [invitation_to_dict(invitation, count) for invitation, count in rows]
        return invitations, build_pagination(page, limit, total)

    def get_invitation(self, invitation_id: int) -> Dict[str, Any]:
        row = self._with_view_counts().filter(Invitation.id == invitation_id).first()
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Invitation with ID {invitation_id} not found",
            )
        invitation, count = row
        return invitation_to_dict(invitation, count)

    def create_invitation(self, invitation_data: InvitationCreate) -> Dict[str, Any]:
        """Create a new invitation; slugs are unique"""
        logger.info(f"Creating invitation with slug '{invitation_data.slug}'")

        try:
            self._ensure_slug_available(invitation_data.slug)

            invitation = Invitation(**invitation_data.model_dump())
            self.db.add(invitation)
            self.db.commit()
            self.db.refresh(invitation)

            logger.info(f"Invitation {invitation.id} created successfully")
            return invitation_to_dict(invitation)

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating invitation: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to create invitation: {str(e)}",
            )

    def update_invitation(self, invitation_id: int, invitation_data: InvitationUpdate) -> Dict[str, Any]:
        logger.info(f"Updating invitation {invitation_id}")

        try:
            invitation = self._get_or_404(invitation_id)
            self._ensure_slug_available(invitation_data.slug, exclude_id=invitation_id)

            for field, value in invitation_data.model_dump().items():
                setattr(invitation, field, value)
            invitation.updated_at = utcnow()

            self.db.commit()
            self.db.refresh(invitation)

            logger.info(f"Invitation {invitation_id} updated successfully")
            return self.get_invitation(invitation_id)

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating invitation {invitation_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to update invitation: {str(e)}",
            )

    def delete_invitation(self, invitation_id: int) -> None:
        """Hard delete. Analytics rows stay in the log with a NULL invitation."""
        logger.info(f"Deleting invitation {invitation_id}")

        try:
            invitation = self._get_or_404(invitation_id)
            self.db.delete(invitation)
            self.db.commit()
            logger.info(f"Invitation {invitation_id} deleted successfully")

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting invitation {invitation_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to delete invitation: {str(e)}",
            )

    def set_confirmation(
        self,
        slug: str,
        action: str,
        ip_address: str,
        user_agent: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Confirm or unconfirm attendance for an active invitation.

        An `rsvp_action_success` event is appended on every call, even when
        the state does not change. Concurrent calls are last-writer-wins.
        """
        try:
            invitation = (
                self.db.query(Invitation)
                .filter(Invitation.slug == slug, Invitation.is_active.is_(True))
                .first()
            )
            if not invitation:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Invitation not found or inactive",
                )

            now = utcnow()
            is_confirmed = action == "confirm"
            invitation.is_confirmed = is_confirmed
            invitation.updated_at = now

            log_event(
                self.db,
                event_type=EVENT_RSVP_ACTION_SUCCESS,
                invitation_id=invitation.id,
                data={
                    "slug": invitation.slug,
                    "action": action,
                    "is_confirmed": is_confirmed,
                    "timestamp": now.isoformat() + "Z",
                    "source": "server",
                },
                ip_address=ip_address,
                user_agent=user_agent or "unknown",
            )
            self.db.commit()

            logger.info(f"Invitation '{invitation.slug}' {action}ed from {ip_address}")
            return {"slug": invitation.slug, "action": action, "is_confirmed": is_confirmed}

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating confirmation for '{slug}': {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to update confirmation: {str(e)}",
            )

    def export_csv(self, tz_name: Optional[str] = None) -> str:
        """All invitations as CSV, including those never viewed"""
        tz = resolve_timezone(tz_name)
        rows = self._with_view_counts().order_by(Invitation.created_at.desc(), Invitation.id.desc()).all()

        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL)
        writer.writerow(EXPORT_HEADERS)
        for invitation, count in rows:
            writer.writerow(
                [
                    invitation.id,
                    invitation.name,
                    invitation.lastname or "",
                    invitation.slug,
                    invitation.number_of_passes,
                    export_status_label(invitation),
                    count or 0,
                    format_local_full(invitation.created_at, tz),
                    format_local_full(invitation.updated_at, tz),
                ]
            )

        logger.info(f"Exported {len(rows)} invitations to CSV")
        return output.getvalue()

    def import_invitations(self, file: UploadFile) -> Dict[str, Any]:
        """
        Bulk create invitations from a .csv or .xlsx spreadsheet.

        Column names are matched case-insensitively. Rows with missing
        required fields, invalid values or slugs that already exist are
        reported and skipped; valid rows are committed together.
        """
        extension = Path(file.filename or "").suffix.lower()
        if extension not in settings.ALLOWED_IMPORT_EXTENSIONS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid file type. Allowed: {', '.join(settings.ALLOWED_IMPORT_EXTENSIONS)}",
            )

        contents = file.file.read()
        if len(contents) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"File exceeds the {settings.MAX_UPLOAD_SIZE_MB} MB limit",
            )

        try:
            if extension == ".csv":
                df = pd.read_csv(io.BytesIO(contents), dtype=str, keep_default_na=False)
            else:
                df = pd.read_excel(io.BytesIO(contents), dtype=str)
        except pd.errors.EmptyDataError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty")
        except Exception as e:
            logger.warning(f"Could not parse import file '{file.filename}': {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Could not read spreadsheet: {str(e)}",
            )

        column_mapping = {}
        for column in df.columns:
            key = str(column).strip().lower()
            if key in IMPORT_REQUIRED_COLUMNS + IMPORT_OPTIONAL_COLUMNS:
                column_mapping[key] = column

        missing = [column for column in IMPORT_REQUIRED_COLUMNS if column not in column_mapping]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Missing required columns: {', '.join(missing)}. Found: {', '.join(map(str, df.columns))}",
            )

        errors = []
        success_count = 0
        skipped_count = 0
        seen_slugs = set()

        try:
            for index, row in df.iterrows():
                line = index + 2
                record = {}
                for key, column in column_mapping.items():
                    value = row[column]
                    if pd.isna(value) or str(value).strip() == "":
                        continue
                    record[key] = str(value).strip()

                if "number_of_passes" in record:
                    try:
                        passes = float(record["number_of_passes"])
                        if not passes.is_integer():
                            raise ValueError(passes)
                        record["number_of_passes"] = int(passes)
                    except (ValueError, OverflowError):
                        errors.append(f"Row {line}: number_of_passes must be a whole number")
                        continue

                try:
                    invitation_data = InvitationCreate(**record)
                except ValidationError as e:
                    first = e.errors()[0]
                    field = ".".join(str(part) for part in first["loc"])
                    errors.append(f"Row {line}: {field}: {first['msg']}")
                    continue

                slug = invitation_data.slug
                exists = self.db.query(Invitation.id).filter(Invitation.slug == slug).first()
                if exists or slug in seen_slugs:
                    skipped_count += 1
                    errors.append(f"Row {line}: slug '{slug}' already exists (skipped)")
                    continue

                seen_slugs.add(slug)
                self.db.add(Invitation(**invitation_data.model_dump()))
                success_count += 1

            if success_count > 0:
                self.db.commit()
                logger.info(f"Imported {success_count} invitations from '{file.filename}'")

            return {
                "total_rows": len(df),
                "success_count": success_count,
                "skipped_count": skipped_count,
                "error_count": len(errors),
                "errors": errors if errors else None,
            }

        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error importing invitations from '{file.filename}': {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to import invitations: {str(e)}",
            )
