from collections import Counter
from datetime import datetime, timedelta, timezone
from itertools import count
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from accounts_app.application.accounts.auth import AuthService
from accounts_app.application.accounts.session import SessionResolver
from accounts_app.application.accounts.use_cases import AccountAdapters, AccountService
from accounts_app.config.settings import Settings
from accounts_app.domain.accounts.entities import Identity, Profile, ResolvedCaller
from accounts_app.domain.accounts.providers import ProviderSession
from accounts_app.infrastructure.cache.redis import get_redis_client
from accounts_app.interfaces.api.app import create_application
from accounts_app.interfaces.api.dependencies import get_identity_provider
from accounts_app.shared.errors import ProviderError

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeIdentityProvider:
    """Provedor em memória: conta chamadas por método e permite injetar falhas."""

    def __init__(self, *, profile_trigger: bool = True) -> None:
        self.identities: dict[str, Identity] = {}
        self.passwords: dict[str, str] = {}
        self.profiles: dict[str, Profile] = {}
        self.tokens: dict[str, str] = {}
        self.reset_emails: list[tuple[str, str]] = []
        self.calls: Counter = Counter()
        self.failures: dict[str, Exception] = {}
        # Simula o trigger do banco que cria o perfil junto com a identidade
        self.profile_trigger = profile_trigger
        self._ticks = count(1)

    # -- Utilitários de teste ---------------------------------------------------

    def fail(self, method: str, message: str = 'provider unavailable') -> None:
        self.failures[method] = ProviderError(message)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    def add_user(
        self,
        email: str,
        role: str,
        *,
        user_id: str | None = None,
        full_name: str | None = None,
        is_active: bool = True,
        password: str = 'secret123',
    ) -> str:
        user_id = user_id or str(uuid4())
        created_at = self._now()
        self.identities[user_id] = Identity(id=user_id, email=email, created_at=created_at)
        self.passwords[user_id] = password
        self.profiles[user_id] = Profile(
            id=user_id,
            email=email,
            role=role,
            full_name=full_name,
            created_at=created_at,
            is_active=is_active,
        )
        token = f'token-{user_id}'
        self.tokens[token] = user_id
        return token

    def _now(self) -> datetime:
        return _EPOCH + timedelta(minutes=next(self._ticks))

    def _enter(self, method: str) -> None:
        self.calls[method] += 1
        if method in self.failures:
            raise self.failures[method]

    # -- IdentityProvider -------------------------------------------------------

    async def sign_in(self, email, password):
        self._enter('sign_in')
        for identity in self.identities.values():
            if identity.email == email and self.passwords.get(identity.id) == password:
                token = f'token-{identity.id}'
                self.tokens[token] = identity.id
                return ProviderSession(access_token=token, refresh_token='refresh', expires_in=3600, identity=identity)
        raise ProviderError('Invalid login credentials', status_code=400)

    async def sign_out(self, access_token):
        self._enter('sign_out')
        self.tokens.pop(access_token, None)

    async def get_session(self, access_token):
        self._enter('get_session')
        identity = self.identities.get(self.tokens.get(access_token, ''))
        if identity is None:
            return None
        return ProviderSession(access_token=access_token, refresh_token='', expires_in=0, identity=identity)

    async def get_current_identity(self, access_token):
        self._enter('get_current_identity')
        return self.identities.get(self.tokens.get(access_token, ''))

    async def update_own_password(self, access_token, new_password):
        self._enter('update_own_password')
        user_id = self.tokens.get(access_token)
        if user_id is None:
            raise ProviderError('Auth session missing!', status_code=401)
        self.passwords[user_id] = new_password

    async def create_identity(self, email, password, *, auto_confirm, metadata):
        self._enter('create_identity')
        if any(identity.email == email for identity in self.identities.values()):
            raise ProviderError('A user with this email address has already been registered', status_code=422)
        user_id = str(uuid4())
        identity = Identity(id=user_id, email=email, user_metadata=dict(metadata), created_at=self._now())
        self.identities[user_id] = identity
        self.passwords[user_id] = password
        if self.profile_trigger:
            self.profiles[user_id] = Profile(
                id=user_id,
                email=email,
                role='tecnico',
                full_name=metadata.get('full_name'),
                created_at=identity.created_at,
            )
        return identity

    async def delete_identity(self, identity_id):
        self._enter('delete_identity')
        if identity_id not in self.identities:
            raise ProviderError('User not found', status_code=404)
        del self.identities[identity_id]
        # cascata auth.users -> user_profiles
        self.profiles.pop(identity_id, None)

    async def update_identity_metadata(self, identity_id, metadata):
        self._enter('update_identity_metadata')
        identity = self.identities.get(identity_id)
        if identity is None:
            raise ProviderError('User not found', status_code=404)
        identity.user_metadata.update(metadata)
        return identity

    async def send_password_reset_email(self, email, *, redirect_to):
        self._enter('send_password_reset_email')
        self.reset_emails.append((email, redirect_to))

    async def read_profile(self, profile_id):
        self._enter('read_profile')
        return self.profiles.get(profile_id)

    async def find_profile_by_email(self, email):
        self._enter('find_profile_by_email')
        return next((profile for profile in self.profiles.values() if profile.email == email), None)

    async def list_profiles(self):
        self._enter('list_profiles')
        return sorted(self.profiles.values(), key=lambda profile: profile.created_at, reverse=True)

    async def insert_profile(self, profile):
        self._enter('insert_profile')
        profile.created_at = profile.created_at or self.identities[profile.id].created_at
        self.profiles[profile.id] = profile
        return profile

    async def update_profile(self, profile_id, fields):
        self._enter('update_profile')
        profile = self.profiles.get(profile_id)
        if profile is None:
            return None
        for key, value in fields.items():
            setattr(profile, key, value)
        return profile


class RecordingRevalidator:
    def __init__(self) -> None:
        self.paths: list[str] = []

    async def revalidate(self, path: str) -> None:
        self.paths.append(path)


class FakeRedis:
    """Subconjunto de redis.asyncio.Redis usado pelo rate limit e pela revalidação."""

    def __init__(self) -> None:
        self.values: dict[str, int | str] = {}
        self.expirations: dict[str, int] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.values:
            return None
        self.values[key] = value
        if ex is not None:
            self.expirations[key] = ex
        return True

    async def pttl(self, key):
        if key not in self.values:
            return -2
        if key not in self.expirations:
            return -1
        return self.expirations[key] * 1000

    async def incr(self, key):
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def settings():
    return Settings(SITE_URL='https://daule.example', DEV_REDIRECT_URL=None, REDIS_ENABLED=False)


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def revalidator():
    return RecordingRevalidator()


@pytest.fixture
def service(provider, revalidator, settings):
    return AccountService(AccountAdapters(provider=provider, revalidator=revalidator), settings)


@pytest.fixture
def auth_service(provider, settings):
    return AuthService(provider=provider, settings=settings)


@pytest.fixture
def admin_caller(provider):
    provider.add_user('admin@daule.gob.ec', 'admin', user_id='admin-1', full_name='Admin Daule')
    provider.calls.clear()
    return ResolvedCaller(identity=provider.identities['admin-1'], profile=provider.profiles['admin-1'])


@pytest.fixture
def tecnico_caller(provider):
    provider.add_user('tecnico@daule.gob.ec', 'tecnico', user_id='tec-1', full_name='Técnico Daule')
    provider.calls.clear()
    return ResolvedCaller(identity=provider.identities['tec-1'], profile=provider.profiles['tec-1'])


@pytest.fixture
def resolver(provider, settings):
    return SessionResolver(provider, settings)


@pytest.fixture
def client(provider):
    app = create_application()

    async def _no_redis():
        yield None

    app.dependency_overrides[get_identity_provider] = lambda: provider
    app.dependency_overrides[get_redis_client] = _no_redis

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
