"""Audit logging of incoming pushes.

Every push is recorded exactly once, whatever the outcome. Durable
storage belongs to the sink implementation; the processor only awaits
the write.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger(__name__)

PROVIDER_NAME = "Buckaroo"


class IncomingPaymentLog(BaseModel):
    """Audit record for one incoming push."""

    provider: str = Field(default=PROVIDER_NAME, description="Payment service provider")
    invoice_number: str = Field(default="", description="Invoice number of the push")
    status_code: int = Field(default=0, description="Provider status code, 0 if absent")
    raw_body: str | None = Field(
        default=None,
        description="Raw body for JSON pushes, None otherwise",
    )
    logged_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When the push was recorded",
    )


class AuditSink(Protocol):
    """Destination for incoming payment logs."""

    async def log_incoming_payment(self, record: IncomingPaymentLog) -> None: ...


class StructlogAuditSink:
    """Writes incoming payment logs to the structured log."""

    def __init__(self) -> None:
        self._logger = logger.bind(component="push_audit")

    async def log_incoming_payment(self, record: IncomingPaymentLog) -> None:
        self._logger.info(
            "incoming_payment",
            provider=record.provider,
            invoice_number=record.invoice_number,
            status_code=record.status_code,
            has_body=record.raw_body is not None,
        )


class InMemoryAuditSink:
    """Keeps incoming payment logs in memory.

    Useful for development and tests.
    """

    def __init__(self, max_records: int = 1000) -> None:
        self._records: list[IncomingPaymentLog] = []
        self._max_records = max_records

    @property
    def records(self) -> list[IncomingPaymentLog]:
        return list(self._records)

    async def log_incoming_payment(self, record: IncomingPaymentLog) -> None:
        self._records.append(record)
        if len(self._records) > self._max_records:
            self._records = self._records[-self._max_records :]

    def for_invoice(self, invoice_number: str) -> list[IncomingPaymentLog]:
        """Get all records for an invoice number."""
        return [r for r in self._records if r.invoice_number == invoice_number]

    def clear(self) -> None:
        self._records.clear()


@dataclass
class AuditEntry:
    """Mutable audit state filled in while a push is processed.

    Attributes:
        invoice_number: Invoice number once resolved.
        status_code: Status code of the result, None if there is none.
        raw_body: Raw JSON body, when the JSON transport was used.
    """

    invoice_number: str = ""
    status_code: int | None = None
    raw_body: str | None = None

    def to_record(self) -> IncomingPaymentLog:
        return IncomingPaymentLog(
            invoice_number=self.invoice_number,
            status_code=self.status_code or 0,
            raw_body=self.raw_body,
        )


@asynccontextmanager
async def audit_scope(sink: AuditSink) -> AsyncIterator[AuditEntry]:
    """Guarantee one audit record on every exit path.

    The entry yielded is written to the sink when the block exits,
    whether it returns normally or raises.

    Usage:
        async with audit_scope(sink) as entry:
            entry.invoice_number = "INV-1"
            ...
    """
    entry = AuditEntry()
    try:
        yield entry
    finally:
        await sink.log_incoming_payment(entry.to_record())
