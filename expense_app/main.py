from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import OperationalError
import logging
import time

import stripe

from expense_app.database import engine, Base
from expense_app.config import settings
from expense_app.api import auth, balance, issuing, pages
from expense_app.services.stripe_service import UpstreamError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def wait_for_db(max_retries=30, delay=2):
    """Waits until the database accepts connections"""
    for i in range(max_retries):
        try:
            with engine.connect():
                pass
            logger.info("Database connected")
            return True
        except OperationalError as e:
            if i < max_retries - 1:
                logger.info("Waiting for database... (%d/%d)", i + 1, max_retries)
                time.sleep(delay)
            else:
                logger.error("Could not connect to database: %s", e)
                return False
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    logger.info("Starting %s", settings.APP_NAME)

    if not settings.SKIP_DB_CHECK:
        if wait_for_db():
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created")
        else:
            logger.warning("Started without a database, registration and login are unavailable")
    else:
        logger.info("Database check skipped (SKIP_DB_CHECK=True)")

    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.APP_NAME,
    description="Expense management on top of Stripe Issuing",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # restrict to the frontend origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Expense Management API",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check"""
    return {"status": "healthy"}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Request validation errors as field/message pairs the forms can show
    """
    errors = []
    for error in exc.errors():
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        message = error.get("msg", "Validation error")
        # pydantic prefixes messages of custom validators
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]

        errors.append({
            "field": field_path,
            "message": message,
            "type": error.get("type", "validation_error"),
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "detail": errors,
            "error": "Validation error"
        }
    )


@app.exception_handler(stripe.StripeError)
async def stripe_exception_handler(request: Request, exc: stripe.StripeError):
    """Stripe SDK failures are reported as a bad gateway"""
    logger.error("Stripe request failed on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": exc.user_message or str(exc),
            "error": "Stripe request failed"
        }
    )


@app.exception_handler(UpstreamError)
async def upstream_exception_handler(request: Request, exc: UpstreamError):
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={
            "detail": str(exc),
            "error": "Stripe request failed"
        }
    )


app.include_router(auth.router)
app.include_router(pages.router)
app.include_router(issuing.router)
app.include_router(balance.router)
