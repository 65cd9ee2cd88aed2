"""FastAPI routes for the Pay Now callback context.

``/paynow/callback`` is the single URL configured as Accept, Decline,
Notify and Redirect URL on the Netcash account: the processor posts the IPN
there and the shopper's browser returns there.
"""

from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from paynow.api.schemas import (
    ConfigureVerifierRequest,
    OrderResponse,
    SeedOrderRequest,
    VerifierConfigResponse,
)
from paynow.config import PayNowSettings
from paynow.exceptions import ConfigurationError, OrderNotFound
from paynow.orders import InMemoryOrderStore, Order, get_order_store
from paynow.reconciliation import CallbackDispatcher, InboundDelivery, OutboundAction, build_dispatcher
from paynow.utils.logging import add_context, clear_context, get_logger
from paynow.verifier import FakeVerifier, get_verifier

logger = get_logger(__name__)

router = APIRouter(prefix="/paynow", tags=["paynow"])


def get_settings() -> PayNowSettings:
    return PayNowSettings.from_env()


def get_dispatcher(settings: PayNowSettings = Depends(get_settings)) -> CallbackDispatcher:
    return build_dispatcher(get_order_store(), get_verifier(settings), settings)


def to_response(action: OutboundAction) -> Response:
    """Render an ``OutboundAction`` as an HTTP response."""
    if action.is_redirect:
        return HTMLResponse(
            content=action.body,
            status_code=action.status_code,
            headers={"Location": action.location},
        )
    return Response(status_code=action.status_code)


def _require_non_production(settings: PayNowSettings) -> None:
    if settings.is_production:
        raise HTTPException(status_code=403, detail="Not available in production")


def _memory_store() -> InMemoryOrderStore:
    store = get_order_store()
    if not isinstance(store, InMemoryOrderStore):
        raise HTTPException(status_code=400, detail="Order seeding only available for InMemoryOrderStore")
    return store


def _order_response(store: InMemoryOrderStore, order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=order.id,
        key=order.key,
        total_amount=order.total_amount,
        status=order.status.value,
        notes=order.notes,
        return_url=store.build_return_url(order),
        cancel_url=store.build_cancel_url(order),
    )


# ---------------------------------------------------------------------------
# Callback
# ---------------------------------------------------------------------------
@router.api_route("/callback", methods=["GET", "POST"])
async def callback(request: Request, dispatcher: CallbackDispatcher = Depends(get_dispatcher)) -> Response:
    """Handle an IPN (form POST) or the shopper's return trip (GET)."""
    fields = {}
    if request.method == "POST":
        form = await request.form()
        fields = {key: value for key, value in form.items() if isinstance(value, str)}

    clear_context()
    add_context(delivery_id=uuid4().hex[:12], method=request.method)
    try:
        action = await run_in_threadpool(dispatcher.handle, InboundDelivery.from_fields(fields))
    except ConfigurationError as exc:
        logger.error("Delivery aborted", error=str(exc))
        return PlainTextResponse(str(exc), status_code=500)
    finally:
        clear_context()

    return to_response(action)


# ---------------------------------------------------------------------------
# Development helpers (non-production only)
# ---------------------------------------------------------------------------
@router.post("/verifier/configure", response_model=VerifierConfigResponse)
async def configure_verifier(
    body: ConfigureVerifierRequest,
    settings: PayNowSettings = Depends(get_settings),
) -> VerifierConfigResponse:
    """Configure the FakeVerifier behavior (non-production only)."""
    _require_non_production(settings)

    verifier = get_verifier(settings)
    if not isinstance(verifier, FakeVerifier):
        raise HTTPException(status_code=400, detail="Verifier configuration only available for FakeVerifier")

    verifier.configure(should_verify=body.should_verify, should_error=body.should_error)
    return VerifierConfigResponse(
        verifier=type(verifier).__name__,
        should_verify=verifier.should_verify,
        should_error=verifier.should_error,
    )


@router.post("/orders", status_code=201, response_model=OrderResponse)
async def seed_order(
    body: SeedOrderRequest,
    settings: PayNowSettings = Depends(get_settings),
) -> OrderResponse:
    """Seed an order into the in-memory store (non-production only)."""
    _require_non_production(settings)
    store = _memory_store()
    order = store.add_order(
        order_id=body.order_id,
        key=body.key,
        total_amount=body.total_amount,
        needs_processing=body.needs_processing,
    )
    return _order_response(store, order)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, settings: PayNowSettings = Depends(get_settings)) -> OrderResponse:
    """Inspect an order in the in-memory store (non-production only)."""
    _require_non_production(settings)
    store = _memory_store()
    try:
        order = store.get_order(order_id)
    except OrderNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _order_response(store, order)
