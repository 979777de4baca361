"""au_lot REST endpoints (Lot Store read).

GET /lots              ordered lot list with server-computed time_left_seconds
GET /lots/{lot_id}     single lot, used to re-read before a bid
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_lot.application.service import LotApplicationService

router = APIRouter(prefix="/lots", tags=["lots"])

_service = LotApplicationService()


@router.get("")
async def list_lots(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    active_only: bool = Query(False, description="Hide deactivated lots"),
) -> ApiResponse:
    lots = await _service.list_lots(db, active_only)
    return success_response(
        [lot.model_dump(mode="json") for lot in lots],
        getattr(request.state, "request_id", None),
    )


@router.get("/{lot_id}")
async def get_lot(
    lot_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    lot = await _service.get_lot(db, lot_id)
    return success_response(lot.model_dump(mode="json"), getattr(request.state, "request_id", None))
