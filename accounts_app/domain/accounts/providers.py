# caminho: accounts_app/domain/accounts/providers.py
# Funções:
# - IdentityProvider: contrato do backend hospedado (identidades + tabela de perfis)
# - ProviderSession: sessão emitida no login

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence

from accounts_app.domain.accounts.entities import Identity, Profile


@dataclass(slots=True)
class ProviderSession:
    access_token: str
    refresh_token: str
    expires_in: int
    identity: Identity


class IdentityProvider(Protocol):
    """Toda falha do provedor é levantada como `ProviderError`."""

    # -- Sessão do próprio usuário ---------------------------------------------
    async def sign_in(self, email: str, password: str) -> ProviderSession: ...

    async def sign_out(self, access_token: str) -> None: ...

    async def get_session(self, access_token: str) -> Optional[ProviderSession]: ...

    async def get_current_identity(self, access_token: str) -> Optional[Identity]: ...

    async def update_own_password(self, access_token: str, new_password: str) -> None: ...

    # -- Administração de identidades ------------------------------------------
    async def create_identity(
        self,
        email: str,
        password: str,
        *,
        auto_confirm: bool,
        metadata: Mapping[str, Any],
    ) -> Identity: ...

    async def delete_identity(self, identity_id: str) -> None: ...

    async def update_identity_metadata(self, identity_id: str, metadata: Mapping[str, Any]) -> Identity: ...

    async def send_password_reset_email(self, email: str, *, redirect_to: str) -> None: ...

    # -- Perfis ----------------------------------------------------------------
    async def read_profile(self, profile_id: str) -> Optional[Profile]: ...

    async def find_profile_by_email(self, email: str) -> Optional[Profile]: ...

    async def list_profiles(self) -> Sequence[Profile]: ...

    async def insert_profile(self, profile: Profile) -> Profile: ...

    async def update_profile(self, profile_id: str, fields: Mapping[str, Any]) -> Optional[Profile]: ...
