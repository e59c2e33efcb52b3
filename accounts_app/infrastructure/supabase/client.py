# caminho: accounts_app/infrastructure/supabase/client.py
# Funções:
# - SupabaseIdentityProvider: implementação httpx do IdentityProvider
#   (GoTrue em /auth/v1, tabela de perfis via PostgREST em /rest/v1)
# - get_http_client(): fornece httpx.AsyncClient via FastAPI Depends

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

import httpx

from accounts_app.config import get_settings
from accounts_app.config.settings import Settings
from accounts_app.domain.accounts.entities import Identity, Profile
from accounts_app.domain.accounts.providers import ProviderSession
from accounts_app.shared.errors import ProviderError
from accounts_app.shared.logging import log_warning

_AUTH_PATH = '/auth/v1'
_REST_PATH = '/rest/v1'


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    settings = get_settings()
    client = httpx.AsyncClient(timeout=settings.SUPABASE_TIMEOUT_S)
    try:
        yield client
    finally:
        await client.aclose()


def _parse_datetime(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def _to_identity(data: Mapping[str, Any]) -> Identity:
    return Identity(
        id=str(data['id']),
        email=str(data.get('email') or ''),
        user_metadata=dict(data.get('user_metadata') or {}),
        created_at=_parse_datetime(data.get('created_at')),
    )


def _to_profile(row: Mapping[str, Any]) -> Profile:
    is_active = row.get('is_active')
    return Profile(
        id=str(row['id']),
        email=str(row.get('email') or ''),
        full_name=row.get('full_name'),
        role=str(row.get('role') or ''),
        created_at=_parse_datetime(row.get('created_at')),
        is_active=True if is_active is None else bool(is_active),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ('msg', 'message', 'error_description', 'error'):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return response.text or f'HTTP {response.status_code}'


class SupabaseIdentityProvider:
    """Chamadas de usuário usam a anon key + token do chamador; chamadas administrativas
    e de perfis usam a service-role key (o gate de papel é feito antes, na aplicação)."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient) -> None:
        self._settings = settings
        self._client = client
        self._base_url = settings.SUPABASE_URL
        self._anon_key = settings.SUPABASE_ANON_KEY.get_secret_value()
        self._service_key = settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value()
        self._profiles_url = f'{self._base_url}{_REST_PATH}/{settings.SUPABASE_PROFILES_TABLE}'

    # -- Sessão do próprio usuário ---------------------------------------------

    async def sign_in(self, email: str, password: str) -> ProviderSession:
        data = await self._request(
            'POST',
            f'{self._base_url}{_AUTH_PATH}/token',
            params={'grant_type': 'password'},
            json={'email': email, 'password': password},
            headers=self._user_headers(),
        )
        return self._to_session(data)

    async def sign_out(self, access_token: str) -> None:
        await self._request(
            'POST',
            f'{self._base_url}{_AUTH_PATH}/logout',
            headers=self._user_headers(access_token),
        )

    async def get_session(self, access_token: str) -> Optional[ProviderSession]:
        identity = await self.get_current_identity(access_token)
        if identity is None:
            return None
        return ProviderSession(access_token=access_token, refresh_token='', expires_in=0, identity=identity)

    async def get_current_identity(self, access_token: str) -> Optional[Identity]:
        try:
            data = await self._request(
                'GET',
                f'{self._base_url}{_AUTH_PATH}/user',
                headers=self._user_headers(access_token),
            )
        except ProviderError as exc:
            # Token expirado/revogado: sessão inexistente, não falha
            if exc.status_code in (401, 403):
                return None
            raise
        if not data or 'id' not in data:
            return None
        return _to_identity(data)

    async def update_own_password(self, access_token: str, new_password: str) -> None:
        await self._request(
            'PUT',
            f'{self._base_url}{_AUTH_PATH}/user',
            json={'password': new_password},
            headers=self._user_headers(access_token),
        )

    # -- Administração de identidades ------------------------------------------

    async def create_identity(
        self,
        email: str,
        password: str,
        *,
        auto_confirm: bool,
        metadata: Mapping[str, Any],
    ) -> Identity:
        data = await self._request(
            'POST',
            f'{self._base_url}{_AUTH_PATH}/admin/users',
            json={
                'email': email,
                'password': password,
                'email_confirm': auto_confirm,
                'user_metadata': dict(metadata),
            },
            headers=self._service_headers(),
        )
        return _to_identity(data.get('user', data))

    async def delete_identity(self, identity_id: str) -> None:
        await self._request(
            'DELETE',
            f'{self._base_url}{_AUTH_PATH}/admin/users/{identity_id}',
            headers=self._service_headers(),
        )

    async def update_identity_metadata(self, identity_id: str, metadata: Mapping[str, Any]) -> Identity:
        data = await self._request(
            'PUT',
            f'{self._base_url}{_AUTH_PATH}/admin/users/{identity_id}',
            json={'user_metadata': dict(metadata)},
            headers=self._service_headers(),
        )
        return _to_identity(data.get('user', data))

    async def send_password_reset_email(self, email: str, *, redirect_to: str) -> None:
        await self._request(
            'POST',
            f'{self._base_url}{_AUTH_PATH}/recover',
            params={'redirect_to': redirect_to},
            json={'email': email},
            headers=self._user_headers(),
        )

    # -- Perfis ----------------------------------------------------------------

    async def read_profile(self, profile_id: str) -> Optional[Profile]:
        rows = await self._request(
            'GET',
            self._profiles_url,
            params={'select': '*', 'id': f'eq.{profile_id}'},
            headers=self._service_headers(),
        )
        return _to_profile(rows[0]) if rows else None

    async def find_profile_by_email(self, email: str) -> Optional[Profile]:
        rows = await self._request(
            'GET',
            self._profiles_url,
            params={'select': '*', 'email': f'eq.{email}', 'limit': '1'},
            headers=self._service_headers(),
        )
        return _to_profile(rows[0]) if rows else None

    async def list_profiles(self) -> Sequence[Profile]:
        rows = await self._request(
            'GET',
            self._profiles_url,
            params={'select': '*', 'order': 'created_at.desc'},
            headers=self._service_headers(),
        )
        return [_to_profile(row) for row in rows or []]

    async def insert_profile(self, profile: Profile) -> Profile:
        rows = await self._request(
            'POST',
            self._profiles_url,
            json={
                'id': profile.id,
                'email': profile.email,
                'full_name': profile.full_name,
                'role': profile.role,
                'is_active': profile.is_active,
            },
            headers={**self._service_headers(), 'Prefer': 'return=representation'},
        )
        if not rows:
            raise ProviderError('Profile insert returned no rows')
        return _to_profile(rows[0])

    async def update_profile(self, profile_id: str, fields: Mapping[str, Any]) -> Optional[Profile]:
        rows = await self._request(
            'PATCH',
            self._profiles_url,
            params={'id': f'eq.{profile_id}'},
            json=dict(fields),
            headers={**self._service_headers(), 'Prefer': 'return=representation'},
        )
        return _to_profile(rows[0]) if rows else None

    # -- Helpers ----------------------------------------------------------------

    def _user_headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            'apikey': self._anon_key,
            'Authorization': f'Bearer {access_token or self._anon_key}',
        }

    def _service_headers(self) -> dict[str, str]:
        return {
            'apikey': self._service_key,
            'Authorization': f'Bearer {self._service_key}',
        }

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            log_warning('SUPABASE_TRANSPORT_ERROR', {'method': method, 'url': url, 'error': str(exc)})
            raise ProviderError(str(exc) or type(exc).__name__) from exc

        if response.is_error:
            message = _error_message(response)
            log_warning(
                'SUPABASE_REQUEST_FAILED',
                {'method': method, 'url': url, 'status': response.status_code, 'error': message},
            )
            raise ProviderError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError('Invalid JSON response from provider', status_code=response.status_code) from exc

    @staticmethod
    def _to_session(data: Mapping[str, Any]) -> ProviderSession:
        return ProviderSession(
            access_token=str(data.get('access_token') or ''),
            refresh_token=str(data.get('refresh_token') or ''),
            expires_in=int(data.get('expires_in') or 0),
            identity=_to_identity(data['user']),
        )
