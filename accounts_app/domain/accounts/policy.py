# caminho: accounts_app/domain/accounts/policy.py
# Funções:
# - is_admin(): gate aplicado antes de toda operação privilegiada
# - is_self_target(): impede que o chamador opere sobre a própria conta (exclusão)

from __future__ import annotations

from typing import Optional

from accounts_app.domain.accounts.entities import ResolvedCaller
from accounts_app.domain.accounts.enums import ROLE_ADMIN


def is_admin(caller: Optional[ResolvedCaller]) -> bool:
    """Verdadeiro apenas para chamador autenticado com perfil legível e papel `admin`."""
    if caller is None or caller.profile is None:
        return False
    return caller.profile.role == ROLE_ADMIN


def is_self_target(caller: Optional[ResolvedCaller], target_id: str) -> bool:
    if caller is None:
        return False
    return caller.id == target_id
