from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool

from app.actions import create_invoice, delete_invoice, update_invoice
from app.auth import require_session
from app.cache import DASHBOARD_PATH, INVOICES_PATH, get_page_cache
from app.core.errors import AppError
from app.core.responses import action_response, form_state_response
from app.db import (
    fetch_card_data,
    fetch_customers,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_invoices_pages,
    fetch_latest_invoices,
)

router = APIRouter(
    prefix="/dashboard",
    tags=["invoices"],
    dependencies=[Depends(require_session)],  # PROTEGE TODO /dashboard/*
)

# el overview no se invalida con las mutaciones de invoices, vence solo
OVERVIEW_TTL_SECONDS = 60


def format_currency(amount_in_cents: int) -> str:
    return f"${amount_in_cents / 100:,.2f}"


def _render_overview() -> Dict[str, Any]:
    cards = fetch_card_data()
    latest = fetch_latest_invoices()
    return {
        "cards": {
            **cards,
            "total_paid_invoices": format_currency(cards["total_paid_invoices"]),
            "total_pending_invoices": format_currency(cards["total_pending_invoices"]),
        },
        "latest_invoices": [
            {**inv, "amount": format_currency(inv["amount"])} for inv in latest
        ],
    }


def _render_invoices(query: str, page: int) -> Dict[str, Any]:
    items = fetch_filtered_invoices(query, page)
    return {
        "query": query,
        "page": page,
        "total_pages": fetch_invoices_pages(query),
        "items": [
            {**inv, "amount": format_currency(inv["amount"])} for inv in items
        ],
    }


@router.get("")
async def get_overview():
    cache = get_page_cache()
    return await run_in_threadpool(
        cache.get_or_render, DASHBOARD_PATH, _render_overview, None, OVERVIEW_TTL_SECONDS
    )


@router.get("/invoices")
async def list_invoices(
    query: str = Query(default=""),
    page: int = Query(default=1, ge=1),
):
    cache = get_page_cache()
    return await run_in_threadpool(
        cache.get_or_render,
        INVOICES_PATH,
        lambda: _render_invoices(query, page),
        {"query": query, "page": page},
    )


@router.get("/invoices/create")
async def create_invoice_form():
    customers = await run_in_threadpool(fetch_customers)
    return {"customers": customers}


@router.post("/invoices/create")
async def submit_create_invoice(request: Request):
    form = await request.form()
    result = await create_invoice(None, form)
    return action_response(result)


@router.get("/invoices/{invoice_id}/edit")
async def edit_invoice_form(invoice_id: str):
    invoice = await run_in_threadpool(fetch_invoice_by_id, invoice_id)
    if not invoice:
        raise AppError(
            code="invoice_not_found",
            message="Invoice not found.",
            status_code=404,
            details={"invoice_id": invoice_id},
        )
    customers = await run_in_threadpool(fetch_customers)
    return {"invoice": invoice, "customers": customers}


@router.post("/invoices/{invoice_id}/edit")
async def submit_update_invoice(invoice_id: str, request: Request):
    form = await request.form()
    result = await update_invoice(invoice_id, None, form)
    return action_response(result)


@router.post("/invoices/{invoice_id}/delete")
async def submit_delete_invoice(invoice_id: str):
    state = await delete_invoice(invoice_id)
    return form_state_response(state)
