# caminho: accounts_app/application/accounts/session.py
# Funções:
# - SessionResolver: token do chamador -> ResolvedCaller (identity + profile) ou None

from __future__ import annotations

from typing import Optional

from jwt import InvalidTokenError, decode

from accounts_app.config.settings import Settings
from accounts_app.domain.accounts.entities import ResolvedCaller
from accounts_app.domain.accounts.providers import IdentityProvider
from accounts_app.shared.errors import ProviderError
from accounts_app.shared.logging import log_info, log_warning


class SessionResolver:
    """Resolve o chamador a cada requisição; nada é guardado entre chamadas.

    - Sem token, token inválido ou identidade desconhecida -> ``None``.
    - Falha ao ler o perfil (ex.: negação de RLS) -> ``ResolvedCaller(profile=None)``.

    Nenhum erro do provedor é propagado a quem chama.
    """

    def __init__(self, provider: IdentityProvider, settings: Settings | None = None) -> None:
        self._provider = provider
        self._settings = settings

    async def resolve(self, access_token: Optional[str]) -> Optional[ResolvedCaller]:
        token = (access_token or '').strip()
        if not token:
            return None

        if not self._passes_local_check(token):
            return None

        try:
            identity = await self._provider.get_current_identity(token)
        except ProviderError as exc:
            log_warning('SESSION_IDENTITY_LOOKUP_FAILED', {'error': exc.message})
            return None
        if identity is None:
            return None

        try:
            profile = await self._provider.read_profile(identity.id)
        except ProviderError as exc:
            # Possível problema de RLS: autenticado, mas sem perfil legível
            log_warning('SESSION_PROFILE_LOOKUP_FAILED', {'identity_id': identity.id, 'error': exc.message})
            profile = None

        log_info('SESSION_RESOLVED', {'identity_id': identity.id, 'has_profile': profile is not None})
        return ResolvedCaller(identity=identity, profile=profile)

    def _passes_local_check(self, token: str) -> bool:
        secret = self._settings.SUPABASE_JWT_SECRET if self._settings else None
        if secret is None:
            return True
        try:
            decode(
                token,
                secret.get_secret_value(),
                algorithms=[self._settings.SUPABASE_JWT_ALGORITHM],
                audience=self._settings.SUPABASE_JWT_AUDIENCE,
            )
        except InvalidTokenError as exc:
            log_info('SESSION_TOKEN_REJECTED', {'reason': type(exc).__name__})
            return False
        return True
