# caminho: accounts_app/application/accounts/dto.py
# Funções:
# - DTOs Pydantic para entrada/saída dos casos de uso de contas
# - ActionResult: resultado uniforme {success, message | error} devolvido à UI

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from accounts_app.config.constants import FULL_NAME_LENGTH_MAX, PASSWORD_LENGTH_MAX


# O papel chega como texto livre e é validado na fachada (ValidationError),
# assim o erro volta no mesmo formato dos demais.
class AccountCreateInput(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(max_length=PASSWORD_LENGTH_MAX)
    full_name: str = Field(default='', max_length=FULL_NAME_LENGTH_MAX)
    role: str = 'tecnico'


class AccountUpdateInput(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    full_name: str = Field(default='', max_length=FULL_NAME_LENGTH_MAX)
    role: str


class AccountToggleInput(BaseModel):
    model_config = ConfigDict(extra='forbid')

    current_state: bool


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    email: str


class PasswordUpdateRequest(BaseModel):
    model_config = ConfigDict(extra='forbid')

    new_password: str = Field(max_length=PASSWORD_LENGTH_MAX)
    new_password_confirm: str = Field(max_length=PASSWORD_LENGTH_MAX)


class SignInRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    email: str
    password: str


class AccountOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None
    is_active: bool = True


class SessionOutput(BaseModel):
    id: str
    email: str
    profile: Optional[AccountOutput] = None


class TokenOutput(BaseModel):
    access_token: str
    refresh_token: str
    token_type: Literal['bearer'] = 'bearer'
    expires_in: int


class ActionResult(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    retry_in_seconds: Optional[int] = None

    accounts: Optional[list[AccountOutput]] = None
    account: Optional[AccountOutput] = None
    is_active: Optional[bool] = None
    session: Optional[SessionOutput] = None
    token: Optional[TokenOutput] = None

    @classmethod
    def ok(cls, message: str | None = None, **payload) -> 'ActionResult':
        return cls(success=True, message=message, **payload)

    @classmethod
    def failure(cls, error: str, error_code: str, **payload) -> 'ActionResult':
        return cls(success=False, error=error, error_code=error_code, **payload)
