# caminho: accounts_app/shared/revalidation.py
# Funções:
# - PathRevalidator: contrato para invalidar páginas renderizadas após mutações
# - RedisPathRevalidator: incrementa a versão da página em Redis (revalidate:<path>)
# - NullPathRevalidator: implementação no-op

from __future__ import annotations

from typing import Protocol

import redis.asyncio as redis
from redis.exceptions import RedisError

from accounts_app.shared.logging import log_info, log_warning


class PathRevalidator(Protocol):
    async def revalidate(self, path: str) -> None: ...


class RedisPathRevalidator:
    """A camada de renderização compara a versão gravada com a que usou no cache."""

    def __init__(self, client: redis.Redis, *, prefix: str = 'revalidate') -> None:
        self._client = client
        self._prefix = prefix

    async def revalidate(self, path: str) -> None:
        key = f'{self._prefix}:{path}'
        try:
            version = await self._client.incr(key)
        except RedisError as exc:
            log_warning('PATH_REVALIDATE_FAILED', {'path': path, 'error': str(exc)})
            return
        log_info('PATH_REVALIDATED', {'path': path, 'version': version})


class NullPathRevalidator:
    async def revalidate(self, path: str) -> None:
        return None
