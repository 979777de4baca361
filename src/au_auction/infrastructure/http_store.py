"""HttpLotStore — LotStoreProtocol over the auction REST API (httpx).

    fetch_lots      GET  /lots
    fetch_lot       GET  /lots/{id}           404 (2005) -> None
    conditional_bid POST /lots/{id}/bids      409 (2003) -> None; bid_id makes
                                              a resubmission return the lot

Every call carries a fresh X-Request-ID, which the server echoes in its
access log and envelope. Timeouts and connection failures become
TransientIOError so the coordinator's retry policy applies; any other error
envelope is re-raised as the matching typed AppError.
"""

import logging
from typing import Any

import httpx

from config.settings import settings
from src.au_auction.domain.models import SessionContext
from src.au_bidding.application.schemas import PlaceBidResponse
from src.au_common.enums import BidPaymentType
from src.au_common.errors import (
    AppError,
    InternalError,
    InvalidCredentialsError,
    LotNotFoundError,
    StaleBidError,
    TransientIOError,
    error_from_code,
)
from src.au_common.response import ApiResponse, new_request_id
from src.au_lot.application.schemas import LotOut
from src.au_lot.domain.models import Lot

logger = logging.getLogger(__name__)


class HttpLotStore:
    def __init__(
        self,
        base_url: str,
        session: SessionContext,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=settings.STORE_TIMEOUT_SECONDS if timeout is None else timeout,
            headers={"Authorization": f"Bearer {session.access_token}"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpLotStore":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        request_id = new_request_id()
        try:
            resp = await self._client.request(
                method, path, headers={"X-Request-ID": request_id}, **kwargs
            )
        except httpx.TimeoutException as exc:
            raise TransientIOError(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            raise TransientIOError(f"{method} {path} failed: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict) or "code" not in body:
            raise _non_envelope_error(method, path, resp.status_code)

        envelope = ApiResponse.model_validate(body)
        if envelope.code != 0:
            logger.debug("%s %s -> code %d (%s)", method, path, envelope.code, request_id)
            raise error_from_code(envelope.code, envelope.message, resp.status_code)
        return envelope.data

    async def fetch_lots(self) -> list[Lot]:
        data = await self._request("GET", "/lots")
        return [LotOut.model_validate(item).to_domain() for item in data]

    async def fetch_lot(self, lot_id: str) -> Lot | None:
        try:
            data = await self._request("GET", f"/lots/{lot_id}")
        except LotNotFoundError:
            return None
        return LotOut.model_validate(data).to_domain()

    async def conditional_bid(
        self,
        lot_id: str,
        expected_current_bid: int,
        new_bid: int,
        payment_type: BidPaymentType,
        bid_id: str,
    ) -> Lot | None:
        payload = {
            "amount_cents": new_bid,
            "payment_type": payment_type.value,
            "expected_current_bid_cents": expected_current_bid,
            "bid_id": bid_id,
        }
        try:
            data = await self._request("POST", f"/lots/{lot_id}/bids", json=payload)
        except StaleBidError:
            logger.info("Conditional bid on lot %s missed at expected %d", lot_id, expected_current_bid)
            return None
        return PlaceBidResponse.model_validate(data).lot.to_domain()


def _non_envelope_error(method: str, path: str, status_code: int) -> AppError:
    """Map a response without the ApiResponse envelope (proxy page, 401 detail)."""
    if status_code == 401:
        return InvalidCredentialsError()
    if status_code >= 500:
        return TransientIOError(f"{method} {path} returned HTTP {status_code}")
    return InternalError(f"{method} {path} returned HTTP {status_code} without an envelope")
