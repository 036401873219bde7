import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from campus_portal.api.fastapi.deps import PortalContext
from campus_portal.api.fastapi.middleware.errors.catchall import CatchAllExceptionMiddleware
from campus_portal.api.fastapi.middleware.errors.handlers import register_error_handlers
from campus_portal.api.fastapi.routers import register_all_routers
from campus_portal.app.core.env import get_env, is_prod
from campus_portal.app.settings import PortalSettings, get_portal_settings
from campus_portal.auth.service import AuthService
from campus_portal.auth.settings import DEFAULT_JWT_SECRET, AuthSettings, get_auth_settings
from campus_portal.db.document import DocumentStore
from campus_portal.db.repository import CollectionRepository
from campus_portal.storage.attachments import AttachmentManager
from campus_portal.storage.backends.local import LocalBackend
from campus_portal.storage.base import StorageBackend

logger = logging.getLogger(__name__)


def build_context(
        settings: PortalSettings | None = None,
        auth_settings: AuthSettings | None = None,
        storage: StorageBackend | None = None,
) -> PortalContext:
    settings = settings or get_portal_settings()
    auth_settings = auth_settings or get_auth_settings()

    store = DocumentStore(settings.db_path)
    store.load()
    repository = CollectionRepository(store)
    backend = storage or LocalBackend(settings.upload_dir, base_url=settings.upload_url)
    return PortalContext(
        settings=settings,
        store=store,
        repository=repository,
        attachments=AttachmentManager(backend, repository),
        auth=AuthService(repository, auth_settings),
    )


def create_app(
        settings: PortalSettings | None = None,
        auth_settings: AuthSettings | None = None,
        storage: StorageBackend | None = None,
) -> FastAPI:
    ctx = build_context(settings, auth_settings, storage)
    settings = ctx.settings

    app = FastAPI(title=settings.name, version=settings.version)
    app.state.portal = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handling
    app.add_middleware(CatchAllExceptionMiddleware)
    register_error_handlers(app)

    register_all_routers(app, base_package="campus_portal.api.fastapi.routers")

    # Uploaded files are public, read-only, by generated name
    if isinstance(ctx.attachments.backend, LocalBackend):
        app.mount(settings.upload_url, StaticFiles(directory=ctx.attachments.backend.base_path), name="uploads")

    if ctx.auth.settings.jwt_secret.get_secret_value() == DEFAULT_JWT_SECRET:
        log = logger.error if is_prod() else logger.warning
        log("AUTH_JWT_SECRET is the built-in default; set it before exposing this service")
    if not settings.require_auth:
        logger.info("Write routes accept unauthenticated requests (PORTAL_REQUIRE_AUTH is off)")

    logger.info(f"{settings.version} version of {settings.name} initialized [env: {get_env()}]")
    return app


__all__ = ["create_app", "build_context"]
