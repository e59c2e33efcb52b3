# caminho: accounts_app/domain/accounts/entities.py
# Funções:
# - Identity: registro de credencial mantido pelo provedor de identidade
# - Profile: registro da aplicação (papel, nome) ligado 1:1 à Identity
# - ResolvedCaller: par identity/profile do chamador de uma requisição

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(slots=True)
class Identity:
    id: str
    email: str
    user_metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class Profile:
    id: str
    email: str
    role: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None
    is_active: bool = True


@dataclass(slots=True)
class ResolvedCaller:
    identity: Identity
    profile: Optional[Profile] = None

    @property
    def id(self) -> str:
        return self.identity.id

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def role(self) -> Optional[str]:
        return self.profile.role if self.profile else None
