from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.analytics import HideMessageRequest
from app.services.message_service import MessageService
from app.utils.dates import utcnow

router = APIRouter()


@router.get("/messages", response_model=dict, status_code=status.HTTP_200_OK)
def list_messages(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    include_hidden: bool = Query(False, description="Also return hidden messages"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Guest messages, newest first; hidden ones only on request"""
    try:
        messages, pagination = MessageService(db).list_messages(
            page=page, limit=limit, include_hidden=include_hidden
        )
        return {
            "status": "success",
            "message": "Messages fetched successfully",
            "data": messages,
            "pagination": pagination,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch messages: {str(e)}",
        )


@router.post("/messages", response_model=dict, status_code=status.HTTP_200_OK)
def hide_message(
    body: HideMessageRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        MessageService(db).hide_message(body.analytics_id)
        return {"status": "success", "message": "Message hidden"}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to hide message: {str(e)}",
        )


@router.delete("/messages", response_model=dict, status_code=status.HTTP_200_OK)
def unhide_message(
    analytics_id: Optional[int] = Query(None, description="Analytics id of the message to show again"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not analytics_id or analytics_id < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="analytics_id is required")

    try:
        MessageService(db).unhide_message(analytics_id)
        return {"status": "success", "message": "Message visible"}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to unhide message: {str(e)}",
        )


@router.get("/export-messages", status_code=status.HTTP_200_OK)
def export_messages(
    tz: Optional[str] = Query(None, description="IANA time zone for the Fecha column"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    csv_content = MessageService(db).export_csv(tz_name=tz)
    filename = f"mensajes_{utcnow().strftime('%Y-%m-%d')}.csv"
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
