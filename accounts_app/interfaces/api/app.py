# caminho: accounts_app/interfaces/api/app.py
# Funções:
# - create_application(): configura FastAPI com logging e rotas

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from accounts_app.config import get_settings
from accounts_app.interfaces.api.routers import accounts, auth
from accounts_app.shared.logging import log_info, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    log_info('APP_STARTUP', {'environment': settings.DEPLOYMENT_ENVIRONMENT, 'supabase_url': settings.SUPABASE_URL})

    yield

    log_info('APP_SHUTDOWN', {'reason': 'lifespan'})


def create_application() -> FastAPI:
    settings = get_settings()
    setup_logging(level=settings.LOG_LEVEL)

    app = FastAPI(
        title='accounts-app',
        version='0.1.0',
        lifespan=lifespan,
    )

    app.include_router(auth.router)
    app.include_router(accounts.router)

    return app
