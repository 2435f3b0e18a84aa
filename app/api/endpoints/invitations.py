from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.core.auth import CurrentUser, get_current_user
from app.core.database import get_db
from app.schemas.invitation import (
    ConfirmationRequest,
    ConfirmationResponse,
    InvitationCreate,
    InvitationImportResult,
    InvitationResponse,
    InvitationUpdate,
)
from app.services.invitation_service import InvitationService
from app.utils.dates import utcnow
from app.utils.request_info import get_client_ip, get_user_agent

router = APIRouter()


@router.post("/confirm", response_model=dict, status_code=status.HTTP_200_OK)
def confirm_invitation(
    confirmation: ConfirmationRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Public RSVP toggle: confirm or unconfirm attendance by slug"""
    try:
        result = InvitationService(db).set_confirmation(
            slug=confirmation.slug,
            action=confirmation.action,
            ip_address=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
        message = "Attendance confirmed" if result["is_confirmed"] else "Attendance cancelled"
        return {
            "status": "success",
            "message": message,
            "data": ConfirmationResponse(**result),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update confirmation: {str(e)}",
        )


@router.get("/export", status_code=status.HTTP_200_OK)
def export_invitations(
    tz: Optional[str] = Query(None, description="IANA time zone for the date columns"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Download every invitation as CSV"""
    csv_content = InvitationService(db).export_csv(tz_name=tz)
    filename = f"invitaciones_{utcnow().strftime('%Y-%m-%d')}.csv"
    return StreamingResponse(
        iter([csv_content]),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-cache",
        },
    )


@router.post("/import", response_model=dict, status_code=status.HTTP_200_OK)
def import_invitations(
    file: UploadFile = File(..., description="Spreadsheet (.csv or .xlsx) with one invitation per row"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Bulk create invitations from a spreadsheet.

    Expected columns (case-insensitive): name, lastname, slug and optionally
    number_of_passes, secondary_name, secondary_lastname.
    """
    try:
        result = InvitationService(db).import_invitations(file)
        return {
            "status": "success",
            "message": f"Imported {result['success_count']} invitation(s)",
            "data": InvitationImportResult(**result),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to import invitations: {str(e)}",
        )


@router.get("", response_model=dict, status_code=status.HTTP_200_OK)
def list_invitations(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=500, description="Items per page"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        invitations, pagination = InvitationService(db).list_invitations(page=page, limit=limit)
        return {
            "status": "success",
            "message": "Invitations fetched successfully",
            "data": [InvitationResponse(**invitation) for invitation in invitations],
            "pagination": pagination,
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch invitations: {str(e)}",
        )


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_invitation(
    invitation_data: InvitationCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        invitation = InvitationService(db).create_invitation(invitation_data)
        return {
            "status": "success",
            "message": "Invitation created successfully",
            "data": InvitationResponse(**invitation),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create invitation: {str(e)}",
        )


@router.get("/{invitation_id}", response_model=dict, status_code=status.HTTP_200_OK)
def get_invitation(
    invitation_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        invitation = InvitationService(db).get_invitation(invitation_id)
        return {
            "status": "success",
            "message": "Invitation fetched successfully",
            "data": InvitationResponse(**invitation),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch invitation: {str(e)}",
        )


@router.put("/{invitation_id}", response_model=dict, status_code=status.HTTP_200_OK)
def update_invitation(
    invitation_id: int,
    invitation_data: InvitationUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        invitation = InvitationService(db).update_invitation(invitation_id, invitation_data)
        return {
            "status": "success",
            "message": "Invitation updated successfully",
            "data": InvitationResponse(**invitation),
        }
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update invitation: {str(e)}",
        )


@router.delete("/{invitation_id}", response_model=dict, status_code=status.HTTP_200_OK)
def delete_invitation(
    invitation_id: int,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        InvitationService(db).delete_invitation(invitation_id)
        return {"status": "success", "message": "Invitation deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete invitation: {str(e)}",
        )
