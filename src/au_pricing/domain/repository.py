"""Repository Protocol for pricing options and recorded messages."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.au_pricing.domain.models import Message, PricingOption


class PricingRepositoryProtocol(Protocol):
    async def list_options(self, db: AsyncSession) -> list[PricingOption]: ...

    async def get_option(self, db: AsyncSession, option_id: str) -> PricingOption | None: ...

    async def create_option(self, db: AsyncSession, option: PricingOption) -> PricingOption: ...

    async def update_option(
        self, db: AsyncSession, option_id: str, fields: dict[str, object]
    ) -> PricingOption | None: ...

    async def insert_message(self, db: AsyncSession, message: Message) -> Message: ...
