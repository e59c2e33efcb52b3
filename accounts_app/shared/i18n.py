# caminho: accounts_app/shared/i18n.py
# Funções:
# - get_translator(locale): função de tradução para mensagens exibidas na UI
# - get_default_translator(): tradutor do idioma padrão (es)

import json
from functools import lru_cache
from pathlib import Path
from typing import Callable

# Catálogos JSON, um arquivo por idioma (es.json, en.json)
LOCALES_PATH = Path(__file__).parent / "localization"
# Idioma padrão (usuários do portal de Daule)
DEFAULT_LOCALE = "es"


@lru_cache(maxsize=None)
def load_catalogue(locale_name: str) -> dict[str, str]:
    """Lê o catálogo do idioma; vazio quando o arquivo não existe."""
    file_path = LOCALES_PATH / f"{locale_name}.json"
    if not file_path.is_file():
        return {}
    with open(file_path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _candidates(locale: str) -> list[str]:
    # 'es-EC' -> ['es_ec', 'es', 'es'(padrão)]
    key = (locale or '').strip().lower().replace('-', '_')
    names = [key, key.split('_')[0], DEFAULT_LOCALE]
    return [name for name in names if name]


def get_translator(locale: str) -> Callable[..., str]:
    """
    Retorna a função de tradução para a localidade especificada.
    Tenta o locale completo, depois o idioma base e por fim DEFAULT_LOCALE.
    """
    catalogue: dict[str, str] = {}
    for name in _candidates(locale):
        catalogue = load_catalogue(name)
        if catalogue:
            break

    def translate(key: str, **kwargs) -> str:
        # Chave desconhecida volta como está
        message = catalogue.get(key, key)
        try:
            return message.format(**kwargs)
        except (KeyError, IndexError):
            return message

    return translate


def get_default_translator() -> Callable[..., str]:
    return get_translator(DEFAULT_LOCALE)
