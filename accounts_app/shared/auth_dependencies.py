# caminho: accounts_app/shared/auth_dependencies.py
# Funções:
# - get_access_token(): extrai o Bearer token emitido pelo Supabase (opcional)

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from accounts_app.config.constants import OAUTH2_SCHEME_TOKEN_URL

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=OAUTH2_SCHEME_TOKEN_URL,
    auto_error=False,  # sem token o gate de papel responde com ActionResult
)


async def get_access_token(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    return (token or '').strip() or None
