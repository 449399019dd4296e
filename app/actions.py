"""
Form actions for the invoice dashboard.

Every action keeps the `(prev_state, form_data) -> state` shape so a form can
resubmit with whatever state it rendered last. `prev_state` is not read.

create/update end in a Redirect to the listing on success; delete returns a
FormState. Store errors are folded into the FormState message, never retried.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from fastapi.concurrency import run_in_threadpool

from app.auth import sign_in
from app.cache import CACHE_ERRORS, INVOICES_PATH, revalidate_path
from app.core.errors import AuthError, StoreError
from app.core.log import log_event
from app.db import delete_invoice as db_delete_invoice
from app.db import insert_invoice, update_invoice as db_update_invoice
from app.schemas import CreateInvoice, FormState, Redirect, UpdateInvoice, safe_parse

ActionResult = Union[FormState, Redirect]


def _invoice_fields(form_data: Mapping[str, Any]) -> dict:
    return {
        "customerId": form_data.get("customerId"),
        "amount": form_data.get("amount"),
        "status": form_data.get("status"),
    }


def _to_cents(amount: float) -> int:
    return round(amount * 100)


def _utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


async def _revalidate_listing() -> None:
    # La escritura ya se commiteó: si falla el cache solo queda el listado viejo
    try:
        await run_in_threadpool(revalidate_path, INVOICES_PATH)
    except CACHE_ERRORS as e:
        log_event("cache_revalidate_failed", logging.ERROR, path=INVOICES_PATH, error=str(e))


async def _revalidate_and_redirect() -> Redirect:
    await _revalidate_listing()
    return Redirect(to=INVOICES_PATH)


async def create_invoice(prev_state: Optional[FormState], form_data: Mapping[str, Any]) -> ActionResult:
    validated = safe_parse(
        CreateInvoice,
        _invoice_fields(form_data),
        message="missing fields. unable to create invoice.",
    )
    if not validated.success:
        return FormState(errors=validated.errors, message=validated.message)

    data = validated.data
    amount_in_cents = _to_cents(data.amount)
    date = _utc_today()

    try:
        await run_in_threadpool(insert_invoice, data.customerId, amount_in_cents, data.status, date)
    except StoreError as e:
        log_event("invoice_store_error", logging.WARNING, action="create", error=str(e))
        return FormState(message=f"database error: unable to create invoice. {e}")

    log_event("invoice_created", customer_id=data.customerId, amount=amount_in_cents, status=data.status)
    return await _revalidate_and_redirect()


async def update_invoice(
    invoice_id: str,
    prev_state: Optional[FormState],
    form_data: Mapping[str, Any],
) -> ActionResult:
    validated = safe_parse(
        UpdateInvoice,
        _invoice_fields(form_data),
        message="missing fields. unable to update invoice.",
    )
    if not validated.success:
        return FormState(errors=validated.errors, message=validated.message)

    data = validated.data
    amount_in_cents = _to_cents(data.amount)

    # Sin chequeo de existencia: un id inexistente actualiza 0 filas y es éxito
    try:
        rows = await run_in_threadpool(
            db_update_invoice, invoice_id, data.customerId, amount_in_cents, data.status
        )
    except StoreError as e:
        log_event("invoice_store_error", logging.WARNING, action="update", invoice_id=invoice_id, error=str(e))
        return FormState(message=f"database error: unable to update invoice. {e}")

    log_event("invoice_updated", invoice_id=invoice_id, rows=rows)
    return await _revalidate_and_redirect()


async def delete_invoice(invoice_id: str) -> FormState:
    try:
        rows = await run_in_threadpool(db_delete_invoice, invoice_id)
    except StoreError as e:
        log_event("invoice_store_error", logging.WARNING, action="delete", invoice_id=invoice_id, error=str(e))
        return FormState(message=f"database error: unable to delete invoice. {e}")

    await _revalidate_listing()
    log_event("invoice_deleted", invoice_id=invoice_id, rows=rows)
    return FormState(message="invoice deleted")


async def authenticate(prev_state: Optional[str], form_data: Mapping[str, Any]) -> Union[str, Redirect]:
    try:
        return await sign_in("credentials", form_data)
    except AuthError as e:
        log_event("sign_in_failed", logging.INFO, type=e.type)
        if e.type == "CredentialsSignin":
            return "invalid authentication."
        return "an error occurred."
