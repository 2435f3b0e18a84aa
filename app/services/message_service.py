import csv
import io
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.analytics_event import EVENT_MESSAGE, AnalyticsEvent
from app.models.invitation import Invitation
from app.models.message_visibility import MessageVisibility
from app.schemas.analytics import MessageEventData
from app.utils.dates import format_local_full, resolve_timezone
from app.utils.pagination import build_pagination, offset_for

logger = get_logger("services.message")

EXPORT_HEADERS = ["Nombre del Invitado", "Mensaje", "Invitación", "Fecha"]
ANONYMOUS_GUEST = "Anónimo"
NO_SLUG = "N/A"


class MessageService:
    """Guest messages are `message` analytics events; hiding one writes a marker row."""

    def __init__(self, db: Session):
        self.db = db

    def _messages_query(self, include_hidden: bool = False):
        query = (
            self.db.query(AnalyticsEvent, Invitation.slug, MessageVisibility.analytics_id.label("hidden_id"))
            .outerjoin(Invitation, AnalyticsEvent.invitation_id == Invitation.id)
            .outerjoin(MessageVisibility, MessageVisibility.analytics_id == AnalyticsEvent.id)
            .filter(AnalyticsEvent.event_type == EVENT_MESSAGE)
        )
        if not include_hidden:
            query = query.filter(MessageVisibility.analytics_id.is_(None))
        return query

    def list_messages(
        self,
        page: int = 1,
        limit: int = 50,
        include_hidden: bool = False,
    ) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        query = self._messages_query(include_hidden)
        total = query.count()
        rows = (
            query.order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc())
            .offset(offset_for(page, limit))
            .limit(limit)
            .all()
        )

        messages = []
        for event, slug, hidden_id in rows:
            data = event.event_data if isinstance(event.event_data, dict) else {}
            messages.append(
                {
                    "id": event.id,
                    "guest_name": data.get("guest_name"),
                    "message": data.get("message"),
                    "slug": slug,
                    "timestamp": event.timestamp,
                    "is_hidden": hidden_id is not None,
                }
            )
        return messages, build_pagination(page, limit, total)

    def hide_message(self, analytics_id: int) -> None:
        """Idempotent: hiding an already hidden message changes nothing"""
        exists = (
            self.db.query(AnalyticsEvent.id)
            .filter(AnalyticsEvent.id == analytics_id, AnalyticsEvent.event_type == EVENT_MESSAGE)
            .first()
        )
        if not exists:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")

        already_hidden = self.db.get(MessageVisibility, analytics_id)
        if already_hidden:
            return

        try:
            self.db.add(MessageVisibility(analytics_id=analytics_id))
            self.db.commit()
            logger.info(f"Message {analytics_id} hidden")
        except IntegrityError:
            # Hidden concurrently by another request
            self.db.rollback()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error hiding message {analytics_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to hide message: {str(e)}",
            )

    def unhide_message(self, analytics_id: int) -> None:
        try:
            deleted = (
                self.db.query(MessageVisibility)
                .filter(MessageVisibility.analytics_id == analytics_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            if deleted:
                logger.info(f"Message {analytics_id} visible again")
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error unhiding message {analytics_id}: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to unhide message: {str(e)}",
            )

    def export_csv(self, tz_name: Optional[str] = None) -> str:
        """Visible messages as CSV with dates in the caller's time zone"""
        tz = resolve_timezone(tz_name)
        rows = self._messages_query().order_by(AnalyticsEvent.timestamp.desc(), AnalyticsEvent.id.desc()).all()

        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL)
        writer.writerow(EXPORT_HEADERS)

        exported = 0
        for event, slug, _ in rows:
            try:
                payload = MessageEventData.model_validate(event.event_data or {})
            except ValidationError:
                logger.warning(f"Skipping malformed message event {event.id}")
                continue

            writer.writerow(
                [
                    (payload.guest_name or "").strip() or ANONYMOUS_GUEST,
                    payload.message,
                    slug or NO_SLUG,
                    format_local_full(event.timestamp, tz),
                ]
            )
            exported += 1

        logger.info(f"Exported {exported} messages to CSV")
        return output.getvalue()
