"""Application configuration and router setup."""

import fastapi
from fastapi import status
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from components.core import init_db
from components.core.config import get_settings
from components.core.errors import ConflictError, LoanOfficeError, NotFoundError, ValidationError
from components.core.logging import get_logger, setup_logging
from restapi.endpoints import (
    auth,
    health_check,
    loan,
    maintenance,
    partner,
    payment,
    receipt,
    report,
)

logger = get_logger(__name__)

ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
}


async def handle_domain_error(request: fastapi.Request, exc: LoanOfficeError) -> JSONResponse:
    """Translate a domain error into an HTTP response."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        status.HTTP_400_BAD_REQUEST,
    )
    if status_code == status.HTTP_409_CONFLICT:
        logger.warning("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = fastapi.FastAPI(
        title="Loan Back Office",
        description="Partner loans, installment plans, payments and receipts",
        version="1.0.0",
    )

    # Initialize database
    init_db.init_db(app)

    app.add_exception_handler(LoanOfficeError, handle_domain_error)

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(partner.router)
    app.include_router(loan.router)
    app.include_router(payment.router)
    app.include_router(receipt.router)
    app.include_router(maintenance.router)
    app.include_router(report.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title="Loan Back Office",
            version="1.0.0",
            description="Partner loans, installment plans, payments and receipts",
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
