
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.middleware.ratelimit import RateLimitMiddleware, client_ip_key, make_user_key
from app.config import settings
from app.db.session import init_db
from app.auth.routes import router as auth_router
from app.users.routes import router as users_router
from app.articles.routes import router as articles_router
from app.annotations.routes import router as annotations_router
from app.web.routes_ui import router as ui_router

def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.rate_limit_window_seconds,
        max_calls=settings.rate_limit_max_calls,
        rules={
            # by address only, session ids rotate on every login
            "/api/login": client_ip_key,
            "/api/register": client_ip_key,
            "/api/articles/upload": make_user_key(settings.secret_key, settings.session_cookie_name),
        },
    )

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(articles_router)
    app.include_router(annotations_router)
    app.include_router(ui_router)

    @app.on_event("startup")
    def on_startup():
        init_db()

    @app.get("/", tags=["root"])
    def root():
        return {"name": settings.app_name, "env": settings.app_env}

    return app

app = create_app()
