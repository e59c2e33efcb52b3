# caminho: accounts_app/application/accounts/use_cases.py
# Funções:
# - Casos de uso do painel de usuários: criar, listar, atualizar, remover,
#   ativar/desativar e disparar e-mail de redefinição de senha
# - Toda operação valida o papel do chamador antes de tocar o provedor e
#   devolve ActionResult (nenhuma exceção atravessa a borda da operação)

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from accounts_app.application.accounts.dto import (
    AccountCreateInput,
    AccountOutput,
    AccountUpdateInput,
    ActionResult,
)
from accounts_app.config.constants import PASSWORD_LENGTH_MIN
from accounts_app.config.settings import Settings
from accounts_app.domain.accounts.entities import Identity, Profile, ResolvedCaller
from accounts_app.domain.accounts.enums import ROLE_CHOICES, normalize_role
from accounts_app.domain.accounts.policy import is_admin, is_self_target
from accounts_app.domain.accounts.providers import IdentityProvider
from accounts_app.shared.errors import (
    AccountsError,
    AuthenticationError,
    AuthorizationError,
    ConsistencyError,
    ProviderError,
    RateLimitedError,
    ValidationError,
)
from accounts_app.shared.i18n import get_default_translator
from accounts_app.shared.logging import log_error, log_info, log_warning
from accounts_app.shared.revalidation import NullPathRevalidator, PathRevalidator

Translator = Callable[..., str]


async def run_guarded(
    operation: str,
    fallback_error: str,
    action: Callable[[], Awaitable[ActionResult]],
    **failure_payload,
) -> ActionResult:
    """Borda das operações: qualquer exceção vira ActionResult.failure."""
    try:
        return await action()
    except AccountsError as exc:
        log_warning(f'{operation}_FAILED', {'code': exc.code, 'error': exc.message})
        if isinstance(exc, RateLimitedError):
            failure_payload['retry_in_seconds'] = exc.retry_in_seconds
        return ActionResult.failure(exc.message or fallback_error, exc.code, **failure_payload)
    except Exception as exc:
        log_error(f'{operation}_UNEXPECTED', {'error': repr(exc)})
        return ActionResult.failure(fallback_error, 'UNEXPECTED_ERROR', **failure_payload)


@dataclass(slots=True)
class AccountAdapters:
    provider: IdentityProvider
    revalidator: PathRevalidator


class AccountService:
    def __init__(
        self,
        adapters: AccountAdapters,
        settings: Settings,
        translator: Translator | None = None,
    ) -> None:
        self._provider = adapters.provider
        self._revalidator = adapters.revalidator or NullPathRevalidator()
        self._settings = settings
        self._ = translator or get_default_translator()

    # -- Casos de Uso ---------------------------------------------------------

    async def create_account(self, caller: Optional[ResolvedCaller], payload: AccountCreateInput) -> ActionResult:
        async def action() -> ActionResult:
            self._require_admin(caller, 'create_forbidden')
            role = self._validate_role(payload.role)
            self._validate_password(payload.password)

            email = payload.email.lower()
            full_name = payload.full_name.strip()

            existing = await self._provider.find_profile_by_email(email)
            if existing is not None:
                log_warning('ACCOUNT_ALREADY_EXISTS', {'email': email})
                raise ValidationError(self._('email_exists'), code='EMAIL_EXISTS')

            identity = await self._provider.create_identity(
                email,
                payload.password,
                auto_confirm=True,
                metadata={'full_name': full_name, 'role': role},
            )
            log_info('IDENTITY_CREATED', {'identity_id': identity.id, 'acting_id': caller.id})

            try:
                profile = await self._write_new_profile(identity, full_name, role)
            except Exception as exc:
                # Qualquer falha aqui deixaria a identidade órfã
                await self._rollback_identity(identity.id)
                message = exc.message if isinstance(exc, AccountsError) else self._('create_failed')
                raise ConsistencyError(message, code='PROFILE_WRITE_FAILED') from exc

            await self._send_invitation(email)
            await self._revalidate_admin_page()
            log_info('ACCOUNT_CREATED', {'account_id': identity.id, 'role': role})
            return ActionResult.ok(self._('create_success'), account=self._to_output(profile))

        return await self._guard('ACCOUNT_CREATE', 'create_failed', action)

    async def list_accounts(self, caller: Optional[ResolvedCaller]) -> ActionResult:
        async def action() -> ActionResult:
            self._require_admin(caller, 'list_forbidden')
            profiles = await self._provider.list_profiles()
            return ActionResult.ok(accounts=[self._to_output(profile) for profile in profiles])

        return await self._guard('ACCOUNT_LIST', 'list_failed', action, accounts=[])

    async def update_account(
        self,
        caller: Optional[ResolvedCaller],
        account_id: str,
        payload: AccountUpdateInput,
    ) -> ActionResult:
        async def action() -> ActionResult:
            self._require_admin(caller, 'update_forbidden')
            role = self._validate_role(payload.role)

            profile = await self._provider.update_profile(
                account_id,
                {'full_name': payload.full_name.strip(), 'role': role},
            )
            if profile is None:
                raise ValidationError(self._('account_not_found'), code='ACCOUNT_NOT_FOUND')

            await self._revalidate_admin_page()
            log_info('ACCOUNT_UPDATED', {'account_id': account_id, 'acting_id': caller.id, 'role': role})
            return ActionResult.ok(self._('update_success'), account=self._to_output(profile))

        return await self._guard('ACCOUNT_UPDATE', 'update_failed', action)

    async def delete_account(self, caller: Optional[ResolvedCaller], account_id: str) -> ActionResult:
        async def action() -> ActionResult:
            self._require_admin(caller, 'delete_forbidden')
            if is_self_target(caller, account_id):
                log_warning('ACCOUNT_SELF_DELETE_FORBIDDEN', {'acting_id': caller.id})
                raise AuthorizationError(self._('self_delete_forbidden'), code='SELF_DELETE_FORBIDDEN')

            # O perfil sai junto pela cascata da tabela
            await self._provider.delete_identity(account_id)
            await self._revalidate_admin_page()
            log_info('ACCOUNT_DELETED', {'account_id': account_id, 'acting_id': caller.id})
            return ActionResult.ok(self._('delete_success'))

        return await self._guard('ACCOUNT_DELETE', 'delete_failed', action)

    async def toggle_active(
        self,
        caller: Optional[ResolvedCaller],
        account_id: str,
        current_state: bool,
    ) -> ActionResult:
        async def action() -> ActionResult:
            self._require_admin(caller, 'toggle_forbidden')
            new_state = not current_state

            profile = await self._provider.update_profile(account_id, {'is_active': new_state})
            if profile is None:
                raise ValidationError(self._('account_not_found'), code='ACCOUNT_NOT_FOUND')

            # Coluna is_active do perfil é a fonte de verdade; metadata é só espelho
            try:
                await self._provider.update_identity_metadata(account_id, {'is_active': new_state})
            except ProviderError as exc:
                log_warning('ACCOUNT_METADATA_MIRROR_FAILED', {'account_id': account_id, 'error': exc.message})

            await self._revalidate_admin_page()
            log_info('ACCOUNT_ACTIVE_TOGGLED', {'account_id': account_id, 'is_active': new_state})
            message_key = 'toggle_success_active' if new_state else 'toggle_success_inactive'
            return ActionResult.ok(self._(message_key), is_active=new_state, account=self._to_output(profile))

        return await self._guard('ACCOUNT_TOGGLE', 'toggle_failed', action)

    async def send_password_reset_email(self, caller: Optional[ResolvedCaller], email: str) -> ActionResult:
        async def action() -> ActionResult:
            self._require_admin(caller, 'reset_forbidden')
            target = (email or '').strip().lower()
            if not target:
                raise ValidationError(self._('email_required'), code='EMAIL_REQUIRED')

            await self._provider.send_password_reset_email(
                target,
                redirect_to=self._settings.password_reset_redirect(),
            )
            log_info('ADMIN_PASSWORD_RESET_SENT', {'email': target, 'acting_id': caller.id})
            return ActionResult.ok(self._('admin_reset_success'))

        return await self._guard('ADMIN_PASSWORD_RESET', 'email_failed', action)

    # -- Helpers ----------------------------------------------------------------

    async def _guard(
        self,
        operation: str,
        failure_key: str,
        action: Callable[[], Awaitable[ActionResult]],
        **failure_payload,
    ) -> ActionResult:
        return await run_guarded(operation, self._(failure_key), action, **failure_payload)

    def _require_admin(self, caller: Optional[ResolvedCaller], forbidden_key: str) -> None:
        if caller is None:
            raise AuthenticationError(self._('not_authenticated'))
        if not is_admin(caller):
            log_warning('ACCOUNT_ADMIN_REQUIRED', {'acting_id': caller.id, 'role': caller.role})
            raise AuthorizationError(self._(forbidden_key))

    def _validate_role(self, role: str) -> str:
        normalized = normalize_role(role)
        if normalized not in ROLE_CHOICES:
            raise ValidationError(self._('invalid_role', role=role), code='INVALID_ROLE')
        return normalized

    def _validate_password(self, password: str) -> None:
        if len(password or '') < PASSWORD_LENGTH_MIN:
            raise ValidationError(self._('password_too_short', min=PASSWORD_LENGTH_MIN), code='PASSWORD_TOO_SHORT')

    async def _write_new_profile(self, identity: Identity, full_name: str, role: str) -> Profile:
        fields = {'full_name': full_name, 'role': role, 'is_active': True}
        profile = await self._provider.update_profile(identity.id, fields)
        if profile is not None:
            return profile
        # Sem trigger no banco: a linha do perfil ainda não existe
        return await self._provider.insert_profile(
            Profile(
                id=identity.id,
                email=identity.email,
                full_name=full_name,
                role=role,
                is_active=True,
            )
        )

    async def _rollback_identity(self, identity_id: str) -> None:
        try:
            await self._provider.delete_identity(identity_id)
            log_warning('IDENTITY_ROLLED_BACK', {'identity_id': identity_id})
        except Exception as exc:
            log_error('IDENTITY_ROLLBACK_FAILED', {'identity_id': identity_id, 'error': repr(exc)})

    async def _send_invitation(self, email: str) -> None:
        try:
            await self._provider.send_password_reset_email(
                email,
                redirect_to=self._settings.password_reset_redirect(invited=True),
            )
        except ProviderError as exc:
            log_warning('INVITATION_EMAIL_FAILED', {'email': email, 'error': exc.message})

    async def _revalidate_admin_page(self) -> None:
        await self._revalidator.revalidate(self._settings.ADMIN_USERS_PATH)

    @staticmethod
    def _to_output(profile: Profile) -> AccountOutput:
        return AccountOutput(
            id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            role=profile.role,
            created_at=profile.created_at,
            is_active=profile.is_active,
        )
