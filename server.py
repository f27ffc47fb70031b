"""
HTTP API for the booking site (aiohttp).

Routes:
- bookings: list, submit, admin delete
- admin config: masked read, admin replace
- payments: Stripe intent, PayPal create/capture, legacy PayPal return URLs
- blogs: list, admin create/delete
"""

import json
import time
from typing import Any, Dict, Optional

import httpx
import pydantic
from aiohttp import web
from aiohttp.web import Request, Response

from admin.auth import require_admin
from admin.config_store import ConfigStore
from bookings.orchestrator import BookingOrchestrator
from config import Settings
from models.admin_config import AdminConfig
from models.blog import BlogCreate
from models.booking import BookingCreate
from notifications.dispatcher import MailerFactory, NotificationDispatcher
from notifications.mailer import SmtpMailer
from payments.gateway import PaymentGatewayAdapter
from utils.constants import DEFAULT_CURRENCY, MAX_REQUEST_BODY_SIZE
from utils.exceptions import (
    BlogNotFoundError,
    BookingNotFoundError,
    ConfirmationInProgress,
    IncompleteCharge,
    PaymentError,
    ProviderError,
    ProviderUnconfigured,
    Unauthorized,
    ValidationError,
)
from utils.logging_config import setup_logging

logger = setup_logging(name=__name__, log_file="server.log")

SETTINGS_KEY = web.AppKey("settings", Settings)
DB_KEY = web.AppKey("db", object)
CONFIG_STORE_KEY = web.AppKey("config_store", ConfigStore)
GATEWAY_KEY = web.AppKey("gateway", PaymentGatewayAdapter)
ORCHESTRATOR_KEY = web.AppKey("orchestrator", BookingOrchestrator)
START_TIME_KEY = web.AppKey("start_time", float)

SUCCESS_PAGE = "<h1>Payment Successful!</h1><p>Check your email.</p>"
FAILED_PAGE = "<h1>Payment failed</h1><p>Your booking was not confirmed.</p>"
PROCESSING_PAGE = "<h1>Payment is being processed</h1><p>Please wait a moment, then check your email.</p>"
CANCELLED_PAGE = "Payment cancelled."


def _error(status: int, message: str, **extra: Any) -> Response:
    return web.json_response({"error": message, **extra}, status=status)


def _provider_message(request: Request, error: ProviderError) -> str:
    """Provider messages are shown as-is except in production."""
    if request.app[SETTINGS_KEY].is_production:
        return "Payment provider error"
    return str(error)


@web.middleware
async def error_middleware(request: Request, handler):
    """Map domain exceptions to JSON error responses."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Unauthorized:
        return _error(403, "Unauthorized")
    except ProviderUnconfigured as e:
        logger.warning(f"{request.method} {request.path}: {e}")
        return _error(400, str(e))
    except IncompleteCharge as e:
        return _error(400, str(e))
    except ConfirmationInProgress as e:
        return _error(409, str(e))
    except ProviderError as e:
        logger.error(f"{request.method} {request.path}: {e.provider} error: {e}")
        return _error(500, _provider_message(request, e))
    except ValidationError as e:
        return _error(400, str(e))
    except pydantic.ValidationError as e:
        return _error(400, "Invalid request", details=[err["msg"] for err in e.errors()])
    except (BookingNotFoundError, BlogNotFoundError) as e:
        return _error(404, str(e))
    except Exception as e:
        logger.error(f"Unexpected error on {request.method} {request.path}: {e}", exc_info=True)
        return _error(500, "Internal server error")


@web.middleware
async def security_headers_middleware(request: Request, handler):
    """
    Add security headers to all responses.

    - Prevents MIME type sniffing
    - Prevents clickjacking
    - Enforces HTTPS in production

    Raised HTTP errors (404, 405, 413) get the same headers.
    """
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        _set_security_headers(request, exc.headers)
        raise

    _set_security_headers(request, response.headers)
    return response


def _set_security_headers(request: Request, headers) -> None:
    headers["X-Content-Type-Options"] = "nosniff"
    headers["X-Frame-Options"] = "DENY"
    if request.app[SETTINGS_KEY].is_production:
        headers["Strict-Transport-Security"] = (
            "max-age=31536000; includeSubDomains"
        )


async def _read_json(request: Request) -> Dict[str, Any]:
    """Parse a JSON object body; an empty body reads as {}."""
    if not request.can_read_body:
        return {}

    raw = await request.read()
    if not raw.strip():
        return {}

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Invalid JSON body: {e}") from e

    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _public_base_url(request: Request) -> str:
    configured = request.app[SETTINGS_KEY].public_base_url
    if configured:
        return configured.rstrip("/")
    return f"https://{request.host}"


def _admin_check(request: Request, payload: Dict[str, Any]) -> None:
    require_admin(payload.get("password"), request.app[SETTINGS_KEY].admin_password)


# ========== Health ==========


async def health_check(request: Request) -> Response:
    """Liveness plus which providers are configured (never the credentials)."""
    config_store = request.app[CONFIG_STORE_KEY]
    config = config_store.get()
    return web.json_response(
        {
            "status": "ok",
            "service": "childcare-booking",
            "timestamp": time.time(),
            "uptime_hours": round((time.time() - request.app[START_TIME_KEY]) / 3600, 2),
            "configuration": {
                "version": config_store.version,
                "stripe": config.stripe_configured,
                "paypal": config.paypal_configured,
                "paypal_flow": request.app[GATEWAY_KEY].redirect_flow,
                "mail": config.mail_configured,
            },
        }
    )


# ========== Bookings ==========


async def list_bookings(request: Request) -> Response:
    bookings = await request.app[DB_KEY].get_all_bookings()
    return web.json_response([booking.to_public() for booking in bookings])


async def create_booking(request: Request) -> Response:
    payload = await _read_json(request)
    booking_data = BookingCreate.model_validate(payload)
    booking = await request.app[ORCHESTRATOR_KEY].submit(booking_data)
    return web.json_response(booking.to_public())


async def delete_booking(request: Request) -> Response:
    payload = await _read_json(request)
    _admin_check(request, payload)

    booking_id = request.match_info["booking_id"]
    if not await request.app[DB_KEY].delete_booking(booking_id):
        raise BookingNotFoundError(f"Booking {booking_id} not found")

    logger.info(f"Booking {booking_id} deleted by admin")
    return web.json_response({"success": True})


# ========== Admin Config ==========


async def get_admin_config(request: Request) -> Response:
    return web.json_response(request.app[CONFIG_STORE_KEY].public_view())


async def replace_admin_config(request: Request) -> Response:
    payload = await _read_json(request)
    new_config = AdminConfig.model_validate(payload)
    await request.app[CONFIG_STORE_KEY].replace(new_config, payload.get("password"))
    return web.json_response({"success": True})


# ========== Payments ==========


async def stripe_payment(request: Request) -> Response:
    """Create a card PaymentIntent; ``amount`` is in major units (dollars)."""
    payload = await _read_json(request)
    intent = await request.app[GATEWAY_KEY].create_charge_intent(
        payload.get("amount"),
        currency=payload.get("currency") or DEFAULT_CURRENCY,
    )
    return web.json_response({"clientSecret": intent.client_secret})


async def paypal_payment(request: Request) -> Response:
    """Start a PayPal payment: ``{forwardLink, paymentId}`` (legacy) or ``{orderID}``."""
    payload = await _read_json(request)
    base_url = _public_base_url(request)
    charge = await request.app[GATEWAY_KEY].create_redirect_charge(
        payload.get("amount"),
        return_url=f"{base_url}/success",
        cancel_url=f"{base_url}/cancel",
        currency=payload.get("currency") or DEFAULT_CURRENCY,
    )
    return web.json_response(charge.to_public())


async def paypal_capture(request: Request) -> Response:
    """Capture an approved PayPal order and store the booking as Paid."""
    payload = await _read_json(request)
    order_id = payload.get("orderID") or payload.get("orderId")
    if not order_id:
        raise ValidationError("orderID is required")

    pending: Optional[BookingCreate] = None
    if payload.get("booking") is not None:
        pending = BookingCreate.model_validate(payload["booking"])

    booking = await request.app[ORCHESTRATOR_KEY].confirm(
        str(order_id), pending=pending, require_booking=True
    )
    return web.json_response(
        {"success": True, "booking": booking.to_public() if booking else None}
    )


async def paypal_success(request: Request) -> Response:
    """Legacy PayPal return URL: execute the payment and settle the booking."""
    payment_id = request.query.get("paymentId", "")
    payer_id = request.query.get("PayerID")

    try:
        booking = await request.app[ORCHESTRATOR_KEY].confirm(payment_id, payer_id=payer_id)
    except ConfirmationInProgress:
        # A reload while the first return request is still executing the payment
        return web.Response(text=PROCESSING_PAGE, content_type="text/html")
    except (PaymentError, ValidationError) as e:
        logger.warning(f"PayPal return for {payment_id!r} failed: {e}")
        return web.Response(text=FAILED_PAGE, content_type="text/html", status=400)

    if booking is None:
        logger.warning(f"PayPal payment {payment_id} completed without a stored booking")
    return web.Response(text=SUCCESS_PAGE, content_type="text/html")


async def paypal_cancel(request: Request) -> Response:
    return web.Response(text=CANCELLED_PAGE)


# ========== Blogs ==========


async def list_blogs(request: Request) -> Response:
    blogs = await request.app[DB_KEY].get_all_blogs()
    return web.json_response([blog.to_public() for blog in blogs])


async def create_blog(request: Request) -> Response:
    payload = await _read_json(request)
    _admin_check(request, payload)

    blog = await request.app[DB_KEY].create_blog(BlogCreate.model_validate(payload))
    logger.info(f"Blog {blog.id} created")
    return web.json_response(blog.to_public())


async def delete_blog(request: Request) -> Response:
    payload = await _read_json(request)
    _admin_check(request, payload)

    blog_id = request.match_info["blog_id"]
    if not await request.app[DB_KEY].delete_blog(blog_id):
        raise BlogNotFoundError(f"Blog {blog_id} not found")

    logger.info(f"Blog {blog_id} deleted by admin")
    return web.json_response({"success": True})


# ========== Application ==========


def create_app(
    settings: Settings,
    db,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    mailer_factory: Optional[MailerFactory] = None,
) -> web.Application:
    """
    Create aiohttp application with middleware, routes and services.

    Args:
        settings: Process settings
        db: Persistence (``SupabaseClient`` in production)
        http_client: Shared httpx client for PayPal (created if omitted)
        mailer_factory: Builds the mail transport from the admin config

    Returns:
        Configured web application; the admin config is loaded on startup
    """
    app = web.Application(
        middlewares=[security_headers_middleware, error_middleware],
        client_max_size=MAX_REQUEST_BODY_SIZE,
    )

    config_store = ConfigStore(
        db,
        admin_password=settings.admin_password,
        fallback=settings.fallback_admin_config(),
    )
    gateway = PaymentGatewayAdapter(
        config_store,
        paypal_mode=settings.paypal_mode,
        paypal_flow=settings.paypal_flow,
        http_client=http_client,
        http_timeout=settings.http_timeout,
    )
    dispatcher = NotificationDispatcher(
        config_store,
        mailer_factory=mailer_factory
        or (lambda config: SmtpMailer.from_config(config, host=settings.smtp_host, port=settings.smtp_port)),
    )

    app[SETTINGS_KEY] = settings
    app[DB_KEY] = db
    app[CONFIG_STORE_KEY] = config_store
    app[GATEWAY_KEY] = gateway
    app[ORCHESTRATOR_KEY] = BookingOrchestrator(db, gateway, dispatcher)
    app[START_TIME_KEY] = time.time()

    async def on_startup(app: web.Application) -> None:
        await app[CONFIG_STORE_KEY].load()

    async def on_cleanup(app: web.Application) -> None:
        await app[GATEWAY_KEY].close()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    app.router.add_get("/health", health_check)

    app.router.add_get("/api/bookings", list_bookings)
    app.router.add_post("/api/bookings", create_booking)
    app.router.add_delete("/api/bookings/{booking_id}", delete_booking)

    app.router.add_get("/api/admin/config", get_admin_config)
    app.router.add_post("/api/admin/config", replace_admin_config)

    app.router.add_post("/api/payment/stripe", stripe_payment)
    app.router.add_post("/api/payment/paypal", paypal_payment)
    app.router.add_post("/api/payment/paypal/capture", paypal_capture)
    app.router.add_get("/success", paypal_success)
    app.router.add_get("/cancel", paypal_cancel)

    app.router.add_get("/api/blogs", list_blogs)
    app.router.add_post("/api/blogs", create_blog)
    app.router.add_delete("/api/blogs/{blog_id}", delete_blog)

    return app
