"""Parish Ledger FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI

from parish_ledger.api.errors import register_exception_handlers
from parish_ledger.api.routes import dashboard, families, payments, units
from parish_ledger.config import Settings
from parish_ledger.database import Database
from parish_ledger.services.clock import Clock, SystemClock
from parish_ledger.services.locale_service import resolve_locale
from parish_ledger.services.logging import setup_server_logging
from parish_ledger.services.month_policy import MonthRangePolicy
from parish_ledger.services.notification_service import (
    EmailNotifier,
    MockTransport,
    NotificationOutbox,
    NotificationTransport,
    NotificationWorker,
    SmtpTransport,
)

logger = logging.getLogger(__name__)


def _default_transport(settings: Settings) -> NotificationTransport:
    if settings.smtp_configured:
        return SmtpTransport.from_settings(settings)
    logger.warning("SMTP is not configured; e-mails will be kept in memory only")
    return MockTransport()


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    transport: NotificationTransport | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Configuration (read from the environment when omitted)
        database: Database handle (built from settings.database_url when omitted)
        transport: E-mail transport (SMTP when configured, in-memory otherwise)
        clock: Source of "today" for the month window (system clock by default)
    """
    settings = settings or Settings()
    owns_database = database is None
    if database is None:
        database = Database(settings.database_url, echo=settings.database_echo)

    locale = resolve_locale(settings.locale)
    policy = MonthRangePolicy(
        settings.subscription_start_month, clock=clock or SystemClock(), locale=locale
    )
    outbox = NotificationOutbox()
    notifier = EmailNotifier(
        transport or _default_transport(settings),
        policy,
        church_name=settings.smtp_from_name,
        locale=locale,
        currency=settings.currency,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifecycle (startup and shutdown)."""
        database.create_all()
        logger.info("Database tables initialized")
        yield
        logger.info("Application shutting down")
        if owns_database:
            database.dispose()

    app = FastAPI(
        title=settings.api_title,
        description="Church office API for families and their monthly subscriptions",
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.policy = policy
    app.state.outbox = outbox
    app.state.notifier = notifier
    app.state.worker = NotificationWorker(outbox, notifier)

    register_exception_handlers(app)

    app.include_router(units.router)
    app.include_router(families.router)
    app.include_router(payments.family_router)
    app.include_router(payments.router)
    app.include_router(dashboard.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "current_month": policy.current_month()}

    return app


if __name__ == "__main__":
    import uvicorn

    load_dotenv()
    settings = Settings()
    setup_server_logging(settings.log_file, settings.log_level)
    uvicorn.run("parish_ledger.main:create_app", factory=True, host="0.0.0.0", port=8000)
