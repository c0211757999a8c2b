from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from storerating.config import Settings, settings as default_settings, DEV_SECRET_KEY
from storerating.db.session import build_engine, build_session_factory, init_db
from storerating.middleware.errors import setup_exception_handlers
from storerating.middleware.logging import request_logging_middleware
from storerating.auth.routes import router as auth_router
from storerating.stores.routes import router as stores_router
from storerating.users.routes import router as users_router
from storerating.users.service import ensure_admin
from storerating.utils.logging import setup_logging
from storerating.utils.security import TokenService, configure_hashing

API_PREFIX = "/api"

def _bootstrap_admin(app: FastAPI, settings: Settings):
    if not (settings.admin_email and settings.admin_password):
        return
    db = app.state.session_factory()
    try:
        ensure_admin(db, settings.admin_name, settings.admin_email, settings.admin_password)
    finally:
        db.close()

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.secret_key == DEV_SECRET_KEY and settings.app_env != "dev":
        logger.warning("SECRET_KEY is not set, tokens are signed with the development key")

    init_db(app.state.engine)
    _bootstrap_admin(app, settings)
    logger.info(f"{settings.app_name} started ({settings.app_env})")
    yield
    app.state.engine.dispose()
    logger.info(f"{settings.app_name} stopped, connection pool drained")

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings.log_level)
    configure_hashing(settings.bcrypt_rounds)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url, echo=settings.database_echo)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.tokens = TokenService(settings.secret_key, settings.access_token_expire_minutes)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_logging_middleware)
    setup_exception_handlers(app)

    app.include_router(auth_router, prefix=API_PREFIX)
    app.include_router(stores_router, prefix=API_PREFIX)
    app.include_router(users_router, prefix=API_PREFIX)

    @app.get("/", tags=["root"])
    def root():
        return {"message": "Welcome to Store Rating API", "name": settings.app_name, "env": settings.app_env}

    return app

app = create_app()
