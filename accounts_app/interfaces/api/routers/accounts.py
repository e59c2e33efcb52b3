# caminho: accounts_app/interfaces/api/routers/accounts.py
# Funções:
# - CRUD de contas do painel /admin/usuarios (somente papel admin)

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from accounts_app.application.accounts.dto import (
    AccountCreateInput,
    AccountToggleInput,
    AccountUpdateInput,
    ActionResult,
    PasswordResetRequest,
)
from accounts_app.application.accounts.use_cases import AccountService
from accounts_app.domain.accounts.entities import ResolvedCaller
from accounts_app.interfaces.api.dependencies import get_account_service, get_current_caller
from accounts_app.interfaces.api.responses import apply_status
from accounts_app.shared.i18n import get_default_translator

router = APIRouter(prefix='/admin/usuarios', tags=['admin'])

_default_ = get_default_translator()


@router.get(
    '',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Listar usuários',
    description="""Retorna todos os perfis ordenados por `created_at` decrescente.

**Proteções**:
- Exige Bearer token de um usuário com papel `admin`.
- Em falha de leitura devolve `accounts: []` junto do erro.
""",
)
async def list_accounts(
    response: Response,
    caller: Optional[ResolvedCaller] = Depends(get_current_caller),
    service: AccountService = Depends(get_account_service),
) -> ActionResult:
    result = await service.list_accounts(caller)
    return apply_status(response, result)


@router.post(
    '',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary=_default_('create_account_summary'),
    description=_default_('create_account_description'),
)
async def create_account(
    payload: AccountCreateInput,
    response: Response,
    caller: Optional[ResolvedCaller] = Depends(get_current_caller),
    service: AccountService = Depends(get_account_service),
) -> ActionResult:
    result = await service.create_account(caller, payload)
    return apply_status(response, result, status.HTTP_201_CREATED)


@router.post(
    '/password-reset',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Enviar e-mail de redefinição',
    description="""Dispara o e-mail de redefinição de senha para o endereço informado.

O link aponta para `<SITE_URL|DEV_REDIRECT_URL>/auth/reset-password`.
""",
)
async def send_password_reset_email(
    payload: PasswordResetRequest,
    response: Response,
    caller: Optional[ResolvedCaller] = Depends(get_current_caller),
    service: AccountService = Depends(get_account_service),
) -> ActionResult:
    result = await service.send_password_reset_email(caller, payload.email)
    return apply_status(response, result)


@router.patch(
    '/{account_id}',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Atualizar usuário',
    description='Atualiza `full_name` e `role` do perfil. O papel deve ser `admin` ou `tecnico`.',
)
async def update_account(
    account_id: str,
    payload: AccountUpdateInput,
    response: Response,
    caller: Optional[ResolvedCaller] = Depends(get_current_caller),
    service: AccountService = Depends(get_account_service),
) -> ActionResult:
    result = await service.update_account(caller, account_id, payload)
    return apply_status(response, result)


@router.delete(
    '/{account_id}',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Remover usuário',
    description="""Exclui a identidade no provedor; o perfil é removido pela cascata.

**Proteções**:
- Impede autoexclusão antes de qualquer chamada ao provedor.
""",
)
async def delete_account(
    account_id: str,
    response: Response,
    caller: Optional[ResolvedCaller] = Depends(get_current_caller),
    service: AccountService = Depends(get_account_service),
) -> ActionResult:
    result = await service.delete_account(caller, account_id)
    return apply_status(response, result)


@router.post(
    '/{account_id}/toggle-active',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Ativar/desativar usuário',
    description='Grava `is_active = !current_state` no perfil e devolve o novo estado.',
)
async def toggle_active(
    account_id: str,
    payload: AccountToggleInput,
    response: Response,
    caller: Optional[ResolvedCaller] = Depends(get_current_caller),
    service: AccountService = Depends(get_account_service),
) -> ActionResult:
    result = await service.toggle_active(caller, account_id, payload.current_state)
    return apply_status(response, result)
