"""Pay Now callback FastAPI application.

Serves the Netcash Pay Now callback URL and, outside production, the
development helpers used by the load tests.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paynow.api import router as paynow_router
from paynow.config import PayNowSettings
from paynow.utils.logging import configure_logging

settings = PayNowSettings.from_env()
configure_logging(debug=settings.debug)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Pay Now Callback API",
    description="Netcash Pay Now IPN verification and order reconciliation",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(paynow_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "environment": settings.environment,
            "verifier": settings.verifier,
        }
    )
