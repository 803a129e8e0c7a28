"""
Bank Portal API Application Factory
"""

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import http_error
from .accounts import router as accounts_router
from .transactions import router as transactions_router
from .beneficiaries import router as beneficiaries_router
from .payments import router as payments_router
from .fx import router as fx_router
from .tax import router as tax_router
from .treasury import router as treasury_router
from .jobs import router as jobs_router
from .crypto import router as crypto_router
from .documents import router as documents_router
from .reports import router as reports_router
from .compliance import router as compliance_router
from .. import __version__
from ..config import get_config
from ..logging_config import setup_logging


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title="Bank Portal API",
        description="Online banking portal over a hosted backend-as-a-service",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/transactions", tags=["Transactions"])
    app.include_router(beneficiaries_router, prefix="/beneficiaries", tags=["Beneficiaries"])
    app.include_router(payments_router, prefix="/payments", tags=["Payments"])
    app.include_router(fx_router, prefix="/fx", tags=["Foreign Exchange"])
    app.include_router(tax_router, prefix="/tax", tags=["Tax"])
    app.include_router(treasury_router, prefix="/treasury", tags=["Treasury"])
    app.include_router(jobs_router, prefix="/jobs", tags=["Jobs"])
    app.include_router(crypto_router, prefix="/crypto", tags=["Crypto"])
    app.include_router(documents_router, prefix="/documents", tags=["Documents"])
    app.include_router(reports_router, prefix="/reports", tags=["Reports"])
    app.include_router(compliance_router, prefix="/compliance", tags=["Compliance"])

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes get a generic not-found body"""
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content={"detail": "Page not found", "path": request.url.path},
            )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail},
                            headers=getattr(exc, "headers", None))

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "bank_portal_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Bank Portal API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "me": "/me",
                "accounts": "/accounts",
                "transactions": "/transactions",
                "beneficiaries": "/beneficiaries",
                "payments": "/payments",
                "fx": "/fx",
                "tax": "/tax",
                "treasury": "/treasury",
                "jobs": "/jobs",
                "crypto": "/crypto",
                "documents": "/documents",
                "reports": "/reports",
                "compliance": "/compliance",
            }
        }

    @app.get("/me", tags=["Session"])
    def get_session(
        user: CurrentUser = Depends(get_current_user),
        system: PortalSystem = Depends(get_portal_system)
    ):
        """Current user and profile, creating the profile on first visit"""
        try:
            profile = system.profiles.ensure(user.id, user.full_name)
        except Exception as e:
            raise http_error(e, "load profile")

        return {"user": {"id": user.id, "email": user.email}, "profile": profile.to_dict()}

    return app


app = create_app()


def run_server(host: str = "0.0.0.0", port: int = 8090, debug: bool = False):
    """Run the FastAPI server"""
    settings = get_config()
    setup_logging(settings.log_level, log_format=settings.log_format)
    uvicorn.run(
        "bank_portal.api:app",
        host=host,
        port=port,
        reload=debug,
        log_level="info"
    )
