from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fest_registry.api.v1.accompanists.router import router as accompanists_router
from fest_registry.api.v1.applications.router import router as applications_router
from fest_registry.api.v1.event_assignments.router import router as event_assignments_router
from fest_registry.api.v1.final_approval.router import router as final_approval_router
from fest_registry.core.config import settings
from fest_registry.core.logging_setup import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level, structured=settings.log_json)

    app = FastAPI(title="Fest Registry")

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"success": True, "message": "Fest registry API is running", "timestamp": datetime.utcnow().isoformat()}

    # Routers
    app.include_router(final_approval_router)
    app.include_router(applications_router)
    app.include_router(event_assignments_router)
    app.include_router(accompanists_router)

    return app


app = create_app()
