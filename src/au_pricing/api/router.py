"""au_pricing REST endpoints.

GET  /pricing/options    ordered pricing options
POST /pricing/preview    cost breakdown for a draft message
POST /messages           record a priced message (auth required)
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel
from src.au_pricing.application.schemas import PreviewRequest, SubmitMessageRequest
from src.au_pricing.application.service import PricingApplicationService

router = APIRouter(tags=["pricing"])

_service = PricingApplicationService()


@router.get("/pricing/options")
async def list_options(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    options = await _service.list_options(db)
    return success_response(
        [o.model_dump() for o in options],
        getattr(request.state, "request_id", None),
    )


@router.post("/pricing/preview")
async def preview(
    body: PreviewRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    charge = await _service.preview(db, body.option_id, body.text, body.quick, body.video)
    return success_response(charge.model_dump(), getattr(request.state, "request_id", None))


@router.post("/messages", status_code=status.HTTP_201_CREATED)
async def submit_message(
    body: SubmitMessageRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    message = await _service.submit_message(db, str(current_user.id), body)
    return success_response(message.model_dump(), getattr(request.state, "request_id", None))
