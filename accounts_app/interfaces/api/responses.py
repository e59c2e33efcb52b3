# caminho: accounts_app/interfaces/api/responses.py
# Funções:
# - apply_status(): traduz o error_code do ActionResult em status HTTP

from __future__ import annotations

from http import HTTPStatus

from fastapi import Response

from accounts_app.application.accounts.dto import ActionResult

_STATUS_BY_CODE: dict[str, int] = {
    'NOT_AUTHENTICATED': HTTPStatus.UNAUTHORIZED,
    'NOT_ADMIN': HTTPStatus.FORBIDDEN,
    'SELF_DELETE_FORBIDDEN': HTTPStatus.FORBIDDEN,
    'ACCOUNT_INACTIVE': HTTPStatus.FORBIDDEN,
    'VALIDATION_ERROR': HTTPStatus.UNPROCESSABLE_ENTITY,
    'INVALID_ROLE': HTTPStatus.UNPROCESSABLE_ENTITY,
    'PASSWORD_TOO_SHORT': HTTPStatus.UNPROCESSABLE_ENTITY,
    'PASSWORD_MISMATCH': HTTPStatus.UNPROCESSABLE_ENTITY,
    'EMAIL_REQUIRED': HTTPStatus.UNPROCESSABLE_ENTITY,
    'EMAIL_EXISTS': HTTPStatus.CONFLICT,
    'EMAIL_NOT_FOUND': HTTPStatus.NOT_FOUND,
    'ACCOUNT_NOT_FOUND': HTTPStatus.NOT_FOUND,
    'RATE_LIMITED': HTTPStatus.TOO_MANY_REQUESTS,
    'PROVIDER_ERROR': HTTPStatus.BAD_REQUEST,
    'PROFILE_WRITE_FAILED': HTTPStatus.BAD_GATEWAY,
    'PROFILE_UNAVAILABLE': HTTPStatus.BAD_GATEWAY,
    'UNEXPECTED_ERROR': HTTPStatus.INTERNAL_SERVER_ERROR,
}


def apply_status(response: Response, result: ActionResult, success_status: int = HTTPStatus.OK) -> ActionResult:
    if result.success:
        response.status_code = success_status
    else:
        response.status_code = _STATUS_BY_CODE.get(result.error_code or '', HTTPStatus.BAD_REQUEST)
    return result
