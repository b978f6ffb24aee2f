"""PostgreSQL implementation of LeadStore."""

from typing import Any
from uuid import UUID

from lessor.db.errors import ConnectionError
from lessor.db.pool import PostgresPool
from lessor.leads.models import Lead
from lessor.leads.store import LeadStore
from lessor.observability.logging import get_logger

logger = get_logger(__name__)

_COLUMNS = """
    id, organization_id, first_name, last_name, phone, email,
    do_not_contact, sms_consent, sms_consent_at, call_consent, call_consent_at,
    is_human_controlled, human_controlled_by, human_controlled_at, created_at
"""


class PostgresLeadStore(LeadStore):
    """PostgreSQL implementation of LeadStore over the `leads` table."""

    def __init__(self, pool: PostgresPool) -> None:
        self._pool = pool

    async def save(self, lead: Lead) -> None:
        try:
            async with self._pool.acquire() as conn:
                await conn.execute(
                    f"""
                    INSERT INTO leads ({_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15)
                    ON CONFLICT (id) DO UPDATE SET
                        first_name = EXCLUDED.first_name,
                        last_name = EXCLUDED.last_name,
                        phone = EXCLUDED.phone,
                        email = EXCLUDED.email,
                        do_not_contact = EXCLUDED.do_not_contact,
                        sms_consent = EXCLUDED.sms_consent,
                        sms_consent_at = EXCLUDED.sms_consent_at,
                        call_consent = EXCLUDED.call_consent,
                        call_consent_at = EXCLUDED.call_consent_at,
                        is_human_controlled = EXCLUDED.is_human_controlled,
                        human_controlled_by = EXCLUDED.human_controlled_by,
                        human_controlled_at = EXCLUDED.human_controlled_at
                    """,
                    lead.id,
                    lead.organization_id,
                    lead.first_name,
                    lead.last_name,
                    lead.phone,
                    lead.email,
                    lead.do_not_contact,
                    lead.sms_consent,
                    lead.sms_consent_at,
                    lead.call_consent,
                    lead.call_consent_at,
                    lead.is_human_controlled,
                    lead.human_controlled_by,
                    lead.human_controlled_at,
                    lead.created_at,
                )
        except Exception as e:
            logger.error("postgres_save_lead_error", lead_id=str(lead.id), error=str(e))
            raise ConnectionError(f"Failed to save lead: {e}", cause=e) from e

    async def get(self, lead_id: UUID) -> Lead | None:
        try:
            async with self._pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"SELECT {_COLUMNS} FROM leads WHERE id = $1",
                    lead_id,
                )
                return self._row_to_lead(row) if row else None
        except Exception as e:
            logger.error("postgres_get_lead_error", lead_id=str(lead_id), error=str(e))
            raise ConnectionError(f"Failed to get lead: {e}", cause=e) from e

    async def set_human_control(
        self,
        lead_id: UUID,
        controlled: bool,
        user_id: UUID | None = None,
    ) -> bool:
        try:
            async with self._pool.acquire() as conn:
                result = await conn.execute(
                    """
                    UPDATE leads SET
                        is_human_controlled = $2,
                        human_controlled_by = CASE WHEN $2 THEN $3::uuid ELSE NULL END,
                        human_controlled_at = CASE WHEN $2 THEN NOW() ELSE NULL END
                    WHERE id = $1
                    """,
                    lead_id,
                    controlled,
                    user_id,
                )
                return result.endswith(" 1")
        except Exception as e:
            logger.error("postgres_set_human_control_error", lead_id=str(lead_id), error=str(e))
            raise ConnectionError(f"Failed to update lead: {e}", cause=e) from e

    def _row_to_lead(self, row: Any) -> Lead:
        return Lead(**dict(row))
