"""Admin REST API. Every endpoint requires the admin role."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_admin.application.schemas import (
    CreateLotRequest,
    CreateOptionRequest,
    SetActiveRequest,
    UpdateLotRequest,
    UpdateOptionRequest,
)
from src.au_admin.application.service import AdminService
from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import require_admin
from src.au_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()

AdminUser = Annotated[UserModel, Depends(require_admin)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


def _rid(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


@router.post("/lots", status_code=status.HTTP_201_CREATED)
async def create_lot(body: CreateLotRequest, request: Request, _: AdminUser, db: Db) -> ApiResponse:
    lot = await _service.create_lot(db, body)
    return success_response(lot.model_dump(mode="json"), _rid(request))


@router.patch("/lots/{lot_id}")
async def update_lot(
    lot_id: str, body: UpdateLotRequest, request: Request, _: AdminUser, db: Db
) -> ApiResponse:
    lot = await _service.update_lot(db, lot_id, body)
    return success_response(lot.model_dump(mode="json"), _rid(request))


@router.post("/lots/{lot_id}/active")
async def set_lot_active(
    lot_id: str, body: SetActiveRequest, request: Request, _: AdminUser, db: Db
) -> ApiResponse:
    lot = await _service.set_active(db, lot_id, body.is_active)
    return success_response(lot.model_dump(mode="json"), _rid(request))


@router.post("/lots/{lot_id}/finish")
async def finish_lot(lot_id: str, request: Request, _: AdminUser, db: Db) -> ApiResponse:
    result = await _service.finish_lot(db, lot_id)
    return success_response(result.model_dump(mode="json"), _rid(request))


@router.get("/lots/{lot_id}/bids")
async def list_lot_bids(
    lot_id: str,
    request: Request,
    _: AdminUser,
    db: Db,
    limit: int = Query(50, ge=1, le=500),
) -> ApiResponse:
    bids = await _service.list_bids(db, lot_id, limit)
    return success_response([b.model_dump() for b in bids], _rid(request))


@router.post("/options", status_code=status.HTTP_201_CREATED)
async def create_option(
    body: CreateOptionRequest, request: Request, _: AdminUser, db: Db
) -> ApiResponse:
    option = await _service.create_option(db, body)
    return success_response(option.model_dump(), _rid(request))


@router.patch("/options/{option_id}")
async def update_option(
    option_id: str, body: UpdateOptionRequest, request: Request, _: AdminUser, db: Db
) -> ApiResponse:
    option = await _service.update_option(db, option_id, body)
    return success_response(option.model_dump(), _rid(request))
