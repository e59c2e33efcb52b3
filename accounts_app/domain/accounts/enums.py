# caminho: accounts_app/domain/accounts/enums.py
# Funções:
# - Define o value object de papel (role) dos usuários do portal.
# - Fornece utilitários para obter escolhas, default e validação.

from __future__ import annotations

from typing import Annotated, Any, Literal, get_args, get_origin

from pydantic import StringConstraints

SC = StringConstraints
LowerStr = SC(strip_whitespace=True, to_lower=True)


def _choices_from_annotated_literal(annotation: Any) -> tuple[str, ...]:
    """Extrai as opções de um tipo Annotated que contém um Literal."""
    if get_origin(annotation) is Literal:
        literal = annotation
    else:
        literal = next((arg for arg in get_args(annotation) if get_origin(arg) is Literal), None)
    if literal is None:
        msg = f'Annotation {annotation!r} does not include a typing.Literal.'
        raise TypeError(msg)
    return tuple(str(value) for value in get_args(literal))


# ─────────────────────────────────────────────────────────────────────────────
# Papéis do portal
# admin   = gerencia contas de usuário (painel /admin/usuarios)
# tecnico = operação de campo, sem acesso ao painel
# ─────────────────────────────────────────────────────────────────────────────
UserRole = Annotated[
    str,
    Literal['admin', 'tecnico'],
    LowerStr,
]
ROLE_CHOICES: tuple[str, ...] = _choices_from_annotated_literal(UserRole)
ROLE_DEFAULT: str = 'tecnico'
ROLE_ADMIN: str = 'admin'


def normalize_role(value: Any) -> str:
    return str(value or '').strip().lower()


def is_valid_role(value: Any) -> bool:
    """Indica se `value` é um dos papéis aceitos pelo portal."""
    if not isinstance(value, str):
        return False
    return normalize_role(value) in ROLE_CHOICES
