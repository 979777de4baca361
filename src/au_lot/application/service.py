"""LotApplicationService — read side of the Lot Store.

Read-only; no commit/rollback needed. Writes go through
au_bidding (bids) and au_admin (operator edits).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_common.datetime_utils import utc_now
from src.au_common.errors import LotNotFoundError
from src.au_lot.application.schemas import LotOut
from src.au_lot.domain.repository import LotRepositoryProtocol
from src.au_lot.infrastructure.persistence import LotRepository


class LotApplicationService:
    def __init__(self, repo: LotRepositoryProtocol | None = None) -> None:
        self._repo: LotRepositoryProtocol = repo or LotRepository()

    async def list_lots(self, db: AsyncSession, active_only: bool = False) -> list[LotOut]:
        lots = await self._repo.list_lots(db, utc_now(), active_only)
        return [LotOut.from_domain(lot) for lot in lots]

    async def get_lot(self, db: AsyncSession, lot_id: str) -> LotOut:
        lot = await self._repo.get_lot(db, lot_id, utc_now())
        if lot is None:
            raise LotNotFoundError(lot_id)
        return LotOut.from_domain(lot)
