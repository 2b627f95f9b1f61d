from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from community_api.config import settings
from community_api.logging_config import configure_logging
from community_api.middleware import TimingMiddleware
from community_api.notifications import LogNotifier, Notifier
from community_api.record_client import RecordClient
from community_api.routers import comments, communities, users
from community_api.services.comment_store import CommentStore, build_comment_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    yield


def create_app(
    record_client: RecordClient | None = None,
    comment_store: CommentStore | None = None,
    notifier: Notifier | None = None,
) -> FastAPI:
    """
    Build the REST facade over the data-access services.

    The embedding application supplies the platform's record client; the
    app still starts without one and every endpoint then answers 503.
    The comment backend follows ``settings.COMMENT_BACKEND`` unless a store
    is passed in.
    """
    app = FastAPI(
        title="Community API",
        description="Comments, communities and users on a remote record platform",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.record_client = record_client
    app.state.comment_store = comment_store or build_comment_store(record_client)
    app.state.notifier = notifier or LogNotifier()

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(comments.router)
    app.include_router(communities.router)
    app.include_router(users.router)

    @app.get("/health")
    async def health():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "record_client": app.state.record_client is not None,
            "comment_backend": type(app.state.comment_store).__name__,
        }

    return app


app = create_app()
