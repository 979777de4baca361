"""PricingRepository — raw text() SQL over pricing_options and messages."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.au_pricing.domain.models import Message, PricingOption

_OPTION_COLUMNS = "id, name, base_cost, description, sort_order"

_LIST_OPTIONS_SQL = text(f"""
    SELECT {_OPTION_COLUMNS}
    FROM pricing_options
    ORDER BY sort_order ASC, id ASC
""")

_GET_OPTION_SQL = text(f"""
    SELECT {_OPTION_COLUMNS}
    FROM pricing_options
    WHERE id = :option_id
""")

_INSERT_OPTION_SQL = text(f"""
    INSERT INTO pricing_options (id, name, base_cost, description, sort_order)
    VALUES (:id, :name, :base_cost, :description, :sort_order)
    RETURNING {_OPTION_COLUMNS}
""")

_INSERT_MESSAGE_SQL = text("""
    INSERT INTO messages (
        id, user_id, option_id, text, email, payment_method,
        quick, video, cost, created_at
    ) VALUES (
        :id, :user_id, :option_id, :text, :email, :payment_method,
        :quick, :video, :cost, :created_at
    )
""")

# Columns an admin may edit; anything else in `fields` is ignored.
_UPDATABLE_OPTION_COLUMNS = ("name", "base_cost", "description", "sort_order")


def _row_to_option(row: object) -> PricingOption:
    return PricingOption(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        base_cost=row.base_cost,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        sort_order=row.sort_order,  # type: ignore[attr-defined]
    )


class PricingRepository:
    async def list_options(self, db: AsyncSession) -> list[PricingOption]:
        result = await db.execute(_LIST_OPTIONS_SQL)
        return [_row_to_option(row) for row in result.fetchall()]

    async def get_option(self, db: AsyncSession, option_id: str) -> PricingOption | None:
        result = await db.execute(_GET_OPTION_SQL, {"option_id": option_id})
        row = result.fetchone()
        return _row_to_option(row) if row else None

    async def create_option(self, db: AsyncSession, option: PricingOption) -> PricingOption:
        result = await db.execute(
            _INSERT_OPTION_SQL,
            {
                "id": option.id,
                "name": option.name,
                "base_cost": option.base_cost,
                "description": option.description,
                "sort_order": option.sort_order,
            },
        )
        return _row_to_option(result.fetchone())

    async def update_option(
        self, db: AsyncSession, option_id: str, fields: dict[str, object]
    ) -> PricingOption | None:
        cols = [c for c in _UPDATABLE_OPTION_COLUMNS if c in fields]
        if not cols:
            return await self.get_option(db, option_id)
        assignments = ", ".join(f"{c} = :{c}" for c in cols)
        stmt = text(
            f"UPDATE pricing_options SET {assignments}, updated_at = NOW()"
            f" WHERE id = :option_id RETURNING {_OPTION_COLUMNS}"
        )
        params = {c: fields[c] for c in cols}
        params["option_id"] = option_id
        result = await db.execute(stmt, params)
        row = result.fetchone()
        return _row_to_option(row) if row else None

    async def insert_message(self, db: AsyncSession, message: Message) -> Message:
        await db.execute(
            _INSERT_MESSAGE_SQL,
            {
                "id": message.id,
                "user_id": message.user_id,
                "option_id": message.option_id,
                "text": message.text,
                "email": message.email,
                "payment_method": message.payment_method,
                "quick": message.quick,
                "video": message.video,
                "cost": message.cost,
                "created_at": message.created_at,
            },
        )
        return message
