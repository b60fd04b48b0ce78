"""
Cron Endpoints

Entry point for an external scheduler (hourly) to run the reminder sweep.
The ARQ worker runs the same sweep on its own cron; either trigger is safe
to use alone or together.

Responses never include internal error details.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse

from reserves.api.deps import get_config
from reserves.core.config import Settings
from reserves.core.security import verify_cron_secret
from reserves.db.database import Database, get_database
from reserves.services.reminder_service import process_all_reminders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"])


@router.api_route(
    "/reminders",
    methods=["GET", "POST"],
    responses={
        200: {"description": "All reminder domains processed"},
        401: {"description": "Missing or wrong cron secret"},
        500: {"description": "At least one reminder domain failed"},
    },
)
async def run_reminders(
    authorization: Optional[str] = Header(None),
    database: Database = Depends(get_database),
    config: Settings = Depends(get_config),
):
    if not verify_cron_secret(authorization, config):
        logger.warning("Rejected reminder trigger with invalid cron secret")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        success = await process_all_reminders(database, config=config)
    except Exception:
        logger.exception("Cron job error")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    if not success:
        return JSONResponse(status_code=500, content={"error": "Failed to process reminders"})
    return {"success": True}
