from datetime import datetime, timezone

from sqlalchemy import text

from salon_api.core.observability import (
    http_exception_handler,
    request_logging_middleware,
    setup_observability,
    unhandled_exception_handler,
    validation_exception_handler,
)
from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from salon_api.core.config import settings
from salon_api.db.session import engine
from salon_api.routers import analytics, assignments, auth, expenses, fixed_expenses, hairdressers, presence, product_categories, products, salary_costs, salary_payments, salons, services, transactions

app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description=(
        "Backend API for a chain of hair salons.\n\n"
        "Every route lives under `/api`. Errors are returned as "
        "`{error, code, request_id, path}` with a French message in `error`.\n"
        "Log in with `POST /api/auth/login`; the client then sends the user id in `X-User-Id`."
    ),
    swagger_ui_parameters={
        "displayRequestDuration": True,
        "defaultModelsExpandDepth": 1,
    },
    openapi_tags=[
        {"name": "health", "description": "Service status."},
        {"name": "auth", "description": "Credential check for admin and hairdresser logins."},
        {"name": "salons", "description": "Salons of the chain."},
        {"name": "hairdressers", "description": "Hairdressers and their login accounts."},
        {"name": "services", "description": "Service catalog and prices."},
        {"name": "products", "description": "Products, categories, per-salon stock and stock movements."},
        {"name": "assignments", "description": "Hairdresser contracts with a salon."},
        {"name": "presence", "description": "Daily presence of hairdressers in salons."},
        {"name": "transactions", "description": "Services performed at the point of sale."},
        {"name": "expenses", "description": "Variable expenses."},
        {"name": "fixed-expenses", "description": "Recurring costs with amounts versioned by effective date."},
        {"name": "salary-costs", "description": "Monthly salary lines imported from payroll."},
        {"name": "salary-payments", "description": "Payments made against salary lines."},
        {"name": "analytics", "description": "Dashboard KPIs, revenue breakdowns, payroll and cost summaries."},
    ],
)

setup_observability()
app.middleware("http")(request_logging_middleware)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

cors_origins = settings.cors_origins or ["http://localhost:3000"]
allow_all_origins = "*" in cors_origins
env_value = settings.env.lower().strip()
allow_origin_regex = settings.cors_origin_regex

if (
    not allow_origin_regex
    and env_value in {"dev", "development", "staging", "stage"}
):
    # Helps local web development where tooling uses dynamic localhost ports.
    allow_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if allow_all_origins else cors_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=not allow_all_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@health_router.get("/ready")
def ready():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        return {"ok": False}
    return {"ok": True}


API_PREFIX = "/api"

app.include_router(health_router, prefix=API_PREFIX)
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(salons.router, prefix=API_PREFIX)
app.include_router(hairdressers.router, prefix=API_PREFIX)
app.include_router(services.router, prefix=API_PREFIX)
app.include_router(product_categories.router, prefix=API_PREFIX)
app.include_router(products.router, prefix=API_PREFIX)
app.include_router(assignments.router, prefix=API_PREFIX)
app.include_router(presence.router, prefix=API_PREFIX)
app.include_router(transactions.router, prefix=API_PREFIX)
app.include_router(expenses.router, prefix=API_PREFIX)
app.include_router(fixed_expenses.router, prefix=API_PREFIX)
app.include_router(salary_costs.router, prefix=API_PREFIX)
app.include_router(salary_payments.router, prefix=API_PREFIX)
app.include_router(analytics.router, prefix=API_PREFIX)


@app.get("/", tags=["health"])
def root():
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "health": f"{API_PREFIX}/health",
        "ready": f"{API_PREFIX}/ready",
    }
