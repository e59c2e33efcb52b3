# caminho: accounts_app/shared/rate_limit.py
# Funções:
# - RateLimiter: contrato do controle de reenvio de e-mails de senha
# - RedisRateLimiter: janela fixa por chave (SET NX EX + PTTL)
# - NullRateLimiter: sem Redis, sempre permite

from __future__ import annotations

import math
from typing import NamedTuple, Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from accounts_app.shared.logging import log_warning


class RateLimitDecision(NamedTuple):
    allowed: bool
    retry_in: int  # segundos


class RateLimiter(Protocol):
    async def acquire(self, key: str) -> RateLimitDecision: ...


class RedisRateLimiter:
    """A primeira chamada grava a chave com expiração; enquanto ela existir,
    novas chamadas são recusadas com o tempo restante.

    Redis fora do ar não bloqueia o fluxo: a chamada é permitida e registrada."""

    def __init__(self, client: redis.Redis, interval_seconds: int, *, prefix: str = 'password:reset') -> None:
        self._client = client
        self._interval = max(1, int(interval_seconds))
        self._prefix = prefix

    async def acquire(self, key: str) -> RateLimitDecision:
        redis_key = f'{self._prefix}:{key.strip().lower()}'
        try:
            if await self._client.set(redis_key, '1', nx=True, ex=self._interval):
                return RateLimitDecision(True, self._interval)
            remaining_ms = await self._client.pttl(redis_key)
        except RedisError as exc:
            log_warning('RATE_LIMIT_UNAVAILABLE', {'key': redis_key, 'error': str(exc)})
            return RateLimitDecision(True, 0)

        # -1: chave sem expiração, -2: expirou entre o SET e o PTTL
        if remaining_ms is None or remaining_ms < 0:
            return RateLimitDecision(False, self._interval)
        return RateLimitDecision(False, max(1, math.ceil(remaining_ms / 1000)))


class NullRateLimiter:
    async def acquire(self, key: str) -> RateLimitDecision:
        return RateLimitDecision(True, 0)
