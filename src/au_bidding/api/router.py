"""au_bidding REST endpoint (Lot Store conditional write).

POST /lots/{lot_id}/bids   place a bid; 409 (code 2003) when the
                           compare-and-set on current_bid misses
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_bidding.application.schemas import PlaceBidRequest
from src.au_bidding.application.service import BiddingService
from src.au_common.database import get_db_session
from src.au_common.response import ApiResponse, success_response
from src.au_gateway.auth.dependencies import get_current_user
from src.au_gateway.user.db_models import UserModel

router = APIRouter(prefix="/lots", tags=["bids"])

_service = BiddingService()


@router.post("/{lot_id}/bids", status_code=status.HTTP_201_CREATED)
async def place_bid(
    lot_id: str,
    body: PlaceBidRequest,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.place_bid(
        db,
        lot_id,
        str(current_user.id),
        body.amount_cents,
        body.payment_type,
        body.expected_current_bid_cents,
        body.bid_id,
    )
    return success_response(result.model_dump(mode="json"), getattr(request.state, "request_id", None))
