"""
FastAPI Application for the Order Valuation service.

Exposes the valuation engine to the back-office order listing/detail,
return-creation and return-detail screens. Every endpoint values the
posted record fresh; nothing is cached or stored.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings

from core.presentation import DisplayTheme, TextFormatter
from valuation.data import order_from_record, return_request_from_record, stored_refund_fields
from valuation.domain import (
    OrderValuationService,
    RefundCalculator,
    ReturnableItemsService,
    ReturnRequestBuilder,
    returned_quantities,
)
from valuation.errors import InvalidReturnRequest
from valuation.presentation import OrderSummaryComposer
from valuation.schemas import (
    CreateReturnRequest,
    OrderValuationRequest,
    OrderValuationResponse,
    RefundQuoteRequest,
    RefundQuoteResponse,
    ReturnableItemsRequest,
    ReturnableItemsResponse,
    ReturnDisplayRequest,
    ReturnDisplayResponse,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

composer = OrderSummaryComposer(theme=DisplayTheme(currency_symbol=settings.currency_symbol))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    logger.info("Starting Order Valuation service...")
    logger.info(
        f"Currency {settings.currency_code.upper()} ({settings.currency_symbol}), "
        f"return window {settings.return_window_days} days"
    )
    yield
    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Order Valuation",
    description="Order totals and refund amounts for the back-office",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InvalidReturnRequest)
async def invalid_return_request_handler(request: Request, exc: InvalidReturnRequest):
    """Report an unsatisfiable return request to the caller."""
    logger.warning(f"Rejected return request on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=422, content=exc.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Error processing {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "An unexpected error occurred"})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "currency": settings.currency_code,
    }


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post("/api/orders/valuation", response_model=OrderValuationResponse)
async def value_order(request: OrderValuationRequest):
    """
    Value an order for the listing and detail screens.
    Returns the breakdown and the formatted summary rows.
    """
    order = order_from_record(request.order, default_currency=settings.currency_code)
    valuation = OrderValuationService().execute(order)

    rows = composer.compose_order_summary(
        valuation,
        coupon_code=order.coupon_code,
        tier_name=order.tier_name,
        free_shipping=order.free_shipping_applied,
    )

    return OrderValuationResponse(
        order_id=order.id,
        currency=order.currency_code,
        valuation=valuation.to_dict(),
        rows=[row.to_dict() for row in rows],
        total_display=TextFormatter.currency(valuation.total, settings.currency_symbol),
    )


@app.post("/api/orders/returnable-items", response_model=ReturnableItemsResponse)
async def returnable_items(request: ReturnableItemsRequest):
    """
    Check whether an order can be returned and quote each returnable line.
    """
    order = order_from_record(request.order, default_currency=settings.currency_code)
    service = ReturnableItemsService(return_window_days=settings.return_window_days)
    result = service.execute(
        order,
        order_status=request.order_status,
        fulfillment_status=request.fulfillment_status,
        delivered_at=request.delivered_at,
        existing_returns=request.existing_returns,
        previously_returned=returned_quantities(request.existing_returns),
    )

    if not result.can_return:
        logger.info(f"Order {order.id} not returnable: {result.reason}")
        return ReturnableItemsResponse(
            can_return=False,
            reason=result.reason,
            order_id=order.id,
        )

    valuation = result.valuation
    return ReturnableItemsResponse(
        can_return=True,
        reason=result.reason,
        order_id=order.id,
        days_remaining=result.metadata.get("days_remaining"),
        returnable_items=[line.to_dict() for line in result.lines],
        discount_info={
            "original_order_total": valuation.original_subtotal,
            "coupon_code": order.coupon_code,
            "coupon_discount": valuation.coupon_discount,
            "points_redeemed": order.points_redeemed,
            "points_discount": valuation.points_discount,
            "pwp_discount": valuation.bundle_promo_discount,
            "variant_discount": valuation.variant_discount,
            "wholesale_discount": valuation.bulk_discount,
            "tier_name": order.tier_name,
            "tier_discount": valuation.tier_discount,
            "membership_promo_discount": valuation.membership_promo_discount,
            "total_discounts": valuation.total_discounts,
            "actual_paid_for_items": valuation.paid_for_items,
        },
    )


# =============================================================================
# RETURN ENDPOINTS
# =============================================================================

@app.post("/api/returns/quote", response_model=RefundQuoteResponse)
async def quote_refund(request: RefundQuoteRequest):
    """
    Preview the refund for the lines selected in the return drawer.
    """
    order = order_from_record(request.order, default_currency=settings.currency_code)
    return_request = return_request_from_record(
        order.id,
        [item.model_dump() for item in request.items],
        shipping_refund=request.shipping_refund,
        previously_returned=returned_quantities(request.existing_returns),
    )

    breakdown = RefundCalculator().execute(return_request, order)

    return RefundQuoteResponse(
        order_id=order.id,
        refund=breakdown.to_dict(),
        rows=[row.to_dict() for row in composer.compose_refund_quote(breakdown)],
    )


@app.post("/api/returns", status_code=201)
async def create_return(request: CreateReturnRequest):
    """
    Build the return record to persist: refund_amount, shipping_refund and
    the order's discount snapshot.
    """
    order = order_from_record(request.order, default_currency=settings.currency_code)
    return_request = return_request_from_record(
        order.id,
        [item.model_dump() for item in request.items],
        shipping_refund=request.shipping_refund,
        previously_returned=returned_quantities(request.existing_returns),
    )

    record = ReturnRequestBuilder().execute(
        order,
        return_request,
        reason=request.reason,
        return_type=request.return_type,
        customer_id=request.customer_id,
        reason_details=request.reason_details,
        admin_notes=request.admin_notes,
        item_details={
            item.item_id: {
                k: v for k, v in (("product_name", item.product_name), ("variant_id", item.variant_id)) if v
            }
            for item in request.items
        },
    )

    logger.info(f"Return {record.id} built for order {order.id}: total_refund={record.total_refund}")
    return {"return": record.to_dict()}


@app.post("/api/returns/display", response_model=ReturnDisplayResponse)
async def display_return(request: ReturnDisplayRequest):
    """
    Format a stored return for the return-detail screen.
    Uses the persisted refund fields only.
    """
    record = request.return_record
    rows = composer.compose_return_detail(
        stored_refund_fields(record),
        status=record.get("status") or "",
        coupon_code=record.get("coupon_code"),
    )
    return ReturnDisplayResponse(
        return_id=record.get("id"),
        rows=[row.to_dict() for row in rows],
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
