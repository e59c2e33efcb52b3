# caminho: accounts_app/interfaces/api/routers/auth.py
# Funções:
# - Endpoints de autenticação (login, logout, sessão, esqueci/redefinir senha)

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Response

from accounts_app.application.accounts.auth import AuthService
from accounts_app.application.accounts.dto import (
    ActionResult,
    PasswordResetRequest,
    PasswordUpdateRequest,
    SignInRequest,
)
from accounts_app.interfaces.api.dependencies import get_auth_service
from accounts_app.interfaces.api.responses import apply_status
from accounts_app.shared.auth_dependencies import get_access_token

router = APIRouter(prefix='/auth', tags=['auth'])


@router.post(
    '/login',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Iniciar sessão',
    description="""Autentica com e-mail/senha no provedor e devolve os tokens e o perfil.

Contas com `is_active = false` são recusadas e a sessão recém-criada é encerrada.
""",
)
async def sign_in(
    payload: SignInRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> ActionResult:
    result = await service.sign_in(payload)
    return apply_status(response, result)


@router.post(
    '/logout',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Encerrar sessão',
)
async def sign_out(
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service),
) -> ActionResult:
    result = await service.sign_out(access_token)
    return apply_status(response, result)


@router.get(
    '/session',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Sessão atual',
    description='Resolve o chamador: identidade e perfil (`profile: null` quando o perfil não pôde ser lido).',
)
async def current_session(
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service),
) -> ActionResult:
    result = await service.current_session(access_token)
    return apply_status(response, result)


@router.post(
    '/forgot-password',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Esqueci minha senha',
    description="""Envia o e-mail de recuperação para uma conta existente.

**Proteções**:
- Rate limit por e-mail (`PASSWORD_RESET_INTERVAL_SECONDS`) monitorado em Redis.
""",
)
async def forgot_password(
    payload: PasswordResetRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
) -> ActionResult:
    result = await service.request_password_reset(payload.email)
    return apply_status(response, result)


@router.post(
    '/reset-password',
    response_model=ActionResult,
    response_model_exclude_none=True,
    summary='Definir nova senha',
    description='Consumido pela página aberta a partir do link do e-mail (sessão de recuperação como Bearer).',
)
async def reset_password(
    payload: PasswordUpdateRequest,
    response: Response,
    access_token: Optional[str] = Depends(get_access_token),
    service: AuthService = Depends(get_auth_service),
) -> ActionResult:
    result = await service.update_password(access_token, payload)
    return apply_status(response, result)
