# caminho: accounts_app/application/accounts/auth.py
# Funções:
# - AuthService: login, logout, sessão atual, "esqueci minha senha" e troca de senha
#   pelo próprio usuário (link recebido por e-mail)
# - Mesma borda de AccountService: toda operação devolve ActionResult

from __future__ import annotations

from typing import Optional

from accounts_app.application.accounts.dto import (
    ActionResult,
    PasswordUpdateRequest,
    SessionOutput,
    SignInRequest,
    TokenOutput,
)
from accounts_app.application.accounts.session import SessionResolver
from accounts_app.application.accounts.use_cases import AccountService, Translator, run_guarded
from accounts_app.config.constants import PASSWORD_LENGTH_MIN
from accounts_app.config.settings import Settings
from accounts_app.domain.accounts.entities import ResolvedCaller
from accounts_app.domain.accounts.providers import IdentityProvider
from accounts_app.shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ProviderError,
    RateLimitedError,
    ValidationError,
)
from accounts_app.shared.i18n import get_default_translator
from accounts_app.shared.logging import log_error, log_info, log_warning
from accounts_app.shared.rate_limit import NullRateLimiter, RateLimiter


class AuthService:
    def __init__(
        self,
        provider: IdentityProvider,
        settings: Settings,
        session_resolver: SessionResolver | None = None,
        password_reset_rate_limiter: RateLimiter | None = None,
        translator: Translator | None = None,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._resolver = session_resolver or SessionResolver(provider, settings)
        self._password_reset_rate_limiter = password_reset_rate_limiter or NullRateLimiter()
        self._ = translator or get_default_translator()

    async def sign_in(self, payload: SignInRequest) -> ActionResult:
        async def action() -> ActionResult:
            email = payload.email.strip().lower()
            if not email or not payload.password:
                raise ValidationError(self._('credentials_required'))

            try:
                session = await self._provider.sign_in(email, payload.password)
            except ProviderError as exc:
                raise AuthenticationError(exc.message or self._('sign_in_failed')) from exc

            try:
                profile = await self._provider.read_profile(session.identity.id)
            except ProviderError as exc:
                # Sem o perfil não há como saber se a conta está ativa
                await self._safe_sign_out(session.access_token)
                log_warning('SIGN_IN_PROFILE_LOOKUP_FAILED', {'identity_id': session.identity.id, 'error': exc.message})
                raise ProviderError(self._('profile_unavailable'), code='PROFILE_UNAVAILABLE') from exc

            if profile is not None and not profile.is_active:
                await self._safe_sign_out(session.access_token)
                log_warning('SIGN_IN_INACTIVE_ACCOUNT', {'identity_id': session.identity.id})
                raise AuthorizationError(self._('account_inactive'), code='ACCOUNT_INACTIVE')

            log_info('SIGN_IN_SUCCEEDED', {'identity_id': session.identity.id})
            caller = ResolvedCaller(identity=session.identity, profile=profile)
            return ActionResult.ok(
                self._('sign_in_success'),
                session=self._to_session(caller),
                token=TokenOutput(
                    access_token=session.access_token,
                    refresh_token=session.refresh_token,
                    expires_in=session.expires_in,
                ),
            )

        return await run_guarded('SIGN_IN', self._('sign_in_failed'), action)

    async def sign_out(self, access_token: Optional[str]) -> ActionResult:
        async def action() -> ActionResult:
            if access_token:
                await self._safe_sign_out(access_token)
            return ActionResult.ok(self._('sign_out_success'))

        return await run_guarded('SIGN_OUT', self._('sign_out_failed'), action)

    async def current_session(self, access_token: Optional[str]) -> ActionResult:
        async def action() -> ActionResult:
            caller = await self._resolver.resolve(access_token)
            if caller is None:
                raise AuthenticationError(self._('not_authenticated'))
            return ActionResult.ok(session=self._to_session(caller))

        return await run_guarded('SESSION', self._('not_authenticated'), action)

    async def request_password_reset(self, email: str) -> ActionResult:
        """Fluxo público "esqueci minha senha": exige conta existente e respeita o rate limit."""
        target = (email or '').strip().lower()

        async def action() -> ActionResult:
            if not target:
                raise ValidationError(self._('email_required'), code='EMAIL_REQUIRED')

            profile = await self._provider.find_profile_by_email(target)
            if profile is None:
                log_warning('PASSWORD_RESET_EMAIL_NOT_FOUND', {'email': target})
                raise ValidationError(self._('email_not_found'), code='EMAIL_NOT_FOUND')

            allowed, retry_in = await self._password_reset_rate_limiter.acquire(target)
            if not allowed:
                raise RateLimitedError(self._('rate_limited', seconds=retry_in), retry_in_seconds=retry_in)

            await self._provider.send_password_reset_email(
                target,
                redirect_to=self._settings.password_reset_redirect(),
            )
            log_info('PASSWORD_RESET_SENT', {'email': target})
            return ActionResult.ok(self._('forgot_success'))

        return await run_guarded('PASSWORD_RESET', self._('email_failed'), action)

    async def update_password(self, access_token: Optional[str], payload: PasswordUpdateRequest) -> ActionResult:
        async def action() -> ActionResult:
            if payload.new_password != payload.new_password_confirm:
                raise ValidationError(self._('password_mismatch'), code='PASSWORD_MISMATCH')
            if len(payload.new_password) < PASSWORD_LENGTH_MIN:
                raise ValidationError(
                    self._('password_too_short', min=PASSWORD_LENGTH_MIN), code='PASSWORD_TOO_SHORT'
                )
            if not access_token:
                raise AuthenticationError(self._('not_authenticated'))

            await self._provider.update_own_password(access_token, payload.new_password)
            # A sessão de recuperação é encerrada: o próximo acesso usa a nova senha
            await self._safe_sign_out(access_token)
            log_info('PASSWORD_UPDATED', {})
            return ActionResult.ok(self._('password_updated'))

        return await run_guarded('PASSWORD_UPDATE', self._('password_failed'), action)

    # -- Helpers ----------------------------------------------------------------

    async def _safe_sign_out(self, access_token: str) -> None:
        try:
            await self._provider.sign_out(access_token)
        except ProviderError as exc:
            log_error('SIGN_OUT_FAILED', {'error': exc.message})

    @staticmethod
    def _to_session(caller: ResolvedCaller) -> SessionOutput:
        profile = caller.profile
        return SessionOutput(
            id=caller.id,
            email=caller.email,
            profile=AccountService._to_output(profile) if profile else None,
        )
