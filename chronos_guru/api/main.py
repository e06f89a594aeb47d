"""Main entrypoint for the Chronos Guru API.

Sets up the FastAPI application, middleware, and routes. Serves the
auto-generated OpenAPI/Swagger UI at `/docs` and Redoc at `/redoc`.

Example:
    Run the API server using uvicorn:

        uvicorn chronos_guru.api.main:app --reload

Notes/Assumptions:
    - CORS is wide-open by default for dev convenience; lock it down in prod.
    - The `app` object is created at import time so uvicorn can discover it.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chronos_guru.api.routers import progress, services, sessions
from chronos_guru.api.settings import settings


def create_app() -> FastAPI:
    """Create and configure the FastAPI app.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Chronos Guru API",
        version="0.1.0",
        description="Conversations, debates and quizzes with historical figures",
    )

    # Set CHRONOS_API_CORS_ALLOW_ALL=false in production.
    if settings.cors_allow_all:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(services.router, prefix="/v1", tags=["services"])
    app.include_router(sessions.router, prefix="/v1", tags=["sessions"])
    app.include_router(progress.router, prefix="/v1", tags=["progress"])
    return app


app = create_app()
