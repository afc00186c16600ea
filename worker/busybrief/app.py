from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import install_auth
from .config import Settings, load_settings
from .errors import install_error_handlers
from .logging import install_app_logging, setup_logging
from .routers.explain import router as explain_router
from .routers.system import health_router, router as system_router
from .services.brief import BriefPipeline
from .state import State


def create_app(settings: Optional[Settings] = None, pipeline: Optional[BriefPipeline] = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Busy Brief Worker", version="1.0.0")

    # Attach config/state; the upstream client is built once here and shared
    app.state.settings = settings
    app.state.state = State(settings=settings, pipeline=pipeline or BriefPipeline.from_settings(settings))
    logging.getLogger("app").info(
        f"brief pipeline ready: contract={app.state.state.pipeline.contract.name} "
        f"model={app.state.state.pipeline.model} attempts={app.state.state.pipeline.attempts}"
    )

    # Starlette runs the last-added middleware first: CORS, then access log, then auth.
    install_auth(app, settings.auth_secret, settings.environment)
    install_app_logging(app)
    allow = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    # Versioned API
    app.include_router(explain_router, prefix="/v1")
    app.include_router(system_router, prefix="/v1")
    # Legacy unversioned endpoint kept for existing clients
    app.include_router(explain_router)
    app.include_router(health_router)
    return app


# Convenience for `uvicorn busybrief.app:app`
app = create_app()
