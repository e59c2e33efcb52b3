# caminho: accounts_app/interfaces/api/dependencies.py
# Funções:
# - get_identity_provider(): instancia o provedor Supabase por requisição
# - get_current_caller(): resolve o chamador a partir do Bearer token
# - get_account_service()/get_auth_service(): instanciam os serviços com adapters concretos

from __future__ import annotations

from typing import Annotated, Optional

import httpx
import redis.asyncio as redis
from fastapi import Depends, Header

from accounts_app.application.accounts.auth import AuthService
from accounts_app.application.accounts.session import SessionResolver
from accounts_app.application.accounts.use_cases import AccountAdapters, AccountService
from accounts_app.config import get_settings
from accounts_app.domain.accounts.entities import ResolvedCaller
from accounts_app.domain.accounts.providers import IdentityProvider
from accounts_app.infrastructure.cache.redis import get_redis_client
from accounts_app.infrastructure.supabase.client import SupabaseIdentityProvider, get_http_client
from accounts_app.shared.auth_dependencies import get_access_token
from accounts_app.shared.i18n import get_translator
from accounts_app.shared.rate_limit import NullRateLimiter, RedisRateLimiter
from accounts_app.shared.revalidation import NullPathRevalidator, RedisPathRevalidator


# Função que extrai o primeiro idioma aceito pelo cliente (ou o padrão das settings)
def get_user_locale(accept_language: Annotated[str | None, Header()] = None) -> str:
    if accept_language:
        # Pega o primeiro idioma da lista (ex: 'es-EC,es;q=0.9' -> 'es_ec')
        locale_tag = accept_language.split(',')[0].split(';')[0].strip().lower()
        return locale_tag.replace('-', '_')
    return get_settings().DEFAULT_LOCALE


UserLocale = Annotated[str, Depends(get_user_locale)]


async def get_identity_provider(http_client: httpx.AsyncClient = Depends(get_http_client)) -> IdentityProvider:
    return SupabaseIdentityProvider(get_settings(), http_client)


async def get_session_resolver(provider: IdentityProvider = Depends(get_identity_provider)) -> SessionResolver:
    return SessionResolver(provider, get_settings())


async def get_current_caller(
    access_token: Optional[str] = Depends(get_access_token),
    resolver: SessionResolver = Depends(get_session_resolver),
) -> Optional[ResolvedCaller]:
    # Resolvido a cada requisição: o papel nunca é reaproveitado de chamadas anteriores
    return await resolver.resolve(access_token)


async def get_account_service(
    locale: UserLocale,
    provider: IdentityProvider = Depends(get_identity_provider),
    redis_client: Optional[redis.Redis] = Depends(get_redis_client),
) -> AccountService:
    settings = get_settings()
    revalidator = NullPathRevalidator() if redis_client is None else RedisPathRevalidator(redis_client)
    adapters = AccountAdapters(provider=provider, revalidator=revalidator)
    return AccountService(adapters=adapters, settings=settings, translator=get_translator(locale))


async def get_auth_service(
    locale: UserLocale,
    provider: IdentityProvider = Depends(get_identity_provider),
    resolver: SessionResolver = Depends(get_session_resolver),
    redis_client: Optional[redis.Redis] = Depends(get_redis_client),
) -> AuthService:
    settings = get_settings()
    if redis_client is None:
        password_reset_rate_limiter = NullRateLimiter()
    else:
        password_reset_rate_limiter = RedisRateLimiter(
            redis_client,
            interval_seconds=settings.PASSWORD_RESET_INTERVAL_SECONDS,
            prefix='password:reset',
        )
    return AuthService(
        provider=provider,
        settings=settings,
        session_resolver=resolver,
        password_reset_rate_limiter=password_reset_rate_limiter,
        translator=get_translator(locale),
    )
