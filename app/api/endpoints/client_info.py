from fastapi import APIRouter, Request, Response, status

from app.utils.dates import utcnow
from app.utils.request_info import get_client_ip

router = APIRouter()


@router.get("/client-info", response_model=dict, status_code=status.HTTP_200_OK)
def get_client_info(request: Request, response: Response):
    """Echo what the server sees of the caller (used by the pages for analytics)"""
    headers = request.headers
    response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
    return {
        "status": "success",
        "message": "Client info fetched successfully",
        "data": {
            "ip": get_client_ip(request),
            "user_agent": headers.get("user-agent", "unknown"),
            "referer": headers.get("referer"),
            "accept_language": headers.get("accept-language"),
            "accept_encoding": headers.get("accept-encoding"),
            "cf_ray": headers.get("cf-ray"),
            "cf_country": headers.get("cf-ipcountry"),
            "cf_visitor": headers.get("cf-visitor"),
            "host": headers.get("host"),
            "origin": headers.get("origin"),
            "timestamp": utcnow().isoformat() + "Z",
        },
    }
