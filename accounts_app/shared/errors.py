# caminho: accounts_app/shared/errors.py
# Funções:
# - Taxonomia de erros das operações de contas (convertidos em ActionResult na borda)

from __future__ import annotations


class AccountsError(Exception):
    """Erro base: `code` é estável para o cliente, `message` é exibida ao usuário."""

    code: str = 'ACCOUNTS_ERROR'

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class AuthenticationError(AccountsError):
    code = 'NOT_AUTHENTICATED'


class AuthorizationError(AccountsError):
    code = 'NOT_ADMIN'


class ValidationError(AccountsError):
    code = 'VALIDATION_ERROR'


class RateLimitedError(AccountsError):
    code = 'RATE_LIMITED'

    def __init__(self, message: str, *, retry_in_seconds: int, code: str | None = None) -> None:
        super().__init__(message, code=code)
        self.retry_in_seconds = retry_in_seconds


class ProviderError(AccountsError):
    code = 'PROVIDER_ERROR'

    def __init__(self, message: str, *, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message, code=code)
        self.status_code = status_code


class ConsistencyError(AccountsError):
    code = 'CONSISTENCY_ERROR'
