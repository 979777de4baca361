"""PricingApplicationService — option reads, price preview, message charge.

The preview and the charge both call compute_cost(); the charge path
additionally checks the client's declared total against it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.au_common.datetime_utils import utc_now
from src.au_common.errors import OptionNotFoundError, PriceMismatchError
from src.au_common.id_generator import generate_id
from src.au_pricing.application.schemas import (
    ChargeOut,
    MessageOut,
    PricingOptionOut,
    SubmitMessageRequest,
)
from src.au_pricing.domain.calculator import compute_cost
from src.au_pricing.domain.models import Message, MessageCharge, PricingOption
from src.au_pricing.domain.repository import PricingRepositoryProtocol
from src.au_pricing.infrastructure.persistence import PricingRepository

logger = logging.getLogger(__name__)


class PricingApplicationService:
    def __init__(
        self,
        repo: PricingRepositoryProtocol | None = None,
        tolerance_cents: int | None = None,
    ) -> None:
        self._repo: PricingRepositoryProtocol = repo or PricingRepository()
        self._tolerance = (
            settings.MESSAGE_TOTAL_TOLERANCE_CENTS if tolerance_cents is None else tolerance_cents
        )

    async def list_options(self, db: AsyncSession) -> list[PricingOptionOut]:
        options = await self._repo.list_options(db)
        return [PricingOptionOut.from_domain(o) for o in options]

    async def _get_option(self, db: AsyncSession, option_id: str) -> PricingOption:
        option = await self._repo.get_option(db, option_id)
        if option is None:
            raise OptionNotFoundError(option_id)
        return option

    async def _charge(
        self, db: AsyncSession, option_id: str, text: str, quick: bool, video: bool
    ) -> MessageCharge:
        option = await self._get_option(db, option_id)
        return compute_cost(text, option.base_cost, quick, video)

    async def preview(
        self, db: AsyncSession, option_id: str, text: str, quick: bool, video: bool
    ) -> ChargeOut:
        charge = await self._charge(db, option_id, text, quick, video)
        return ChargeOut.from_charge(charge)

    async def submit_message(
        self, db: AsyncSession, user_id: str, req: SubmitMessageRequest
    ) -> MessageOut:
        charge = await self._charge(db, req.option_id, req.text, req.quick, req.video)
        if abs(req.declared_total_cents - charge.total) > self._tolerance:
            logger.warning(
                "Message total mismatch for user %s: declared=%d computed=%d",
                user_id,
                req.declared_total_cents,
                charge.total,
            )
            raise PriceMismatchError(req.declared_total_cents, charge.total)

        message = Message(
            id=generate_id("MSG"),
            user_id=user_id,
            option_id=req.option_id,
            text=req.text,
            email=req.email,
            payment_method=req.payment_method.value,
            quick=req.quick,
            video=req.video,
            cost=charge.total,
            created_at=utc_now(),
        )
        try:
            await self._repo.insert_message(db, message)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Recorded message %s for user %s: %d cents", message.id, user_id, message.cost)
        return MessageOut.from_domain(message)
