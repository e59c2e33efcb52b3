# caminho: accounts_app/main.py
# Funções:
# - app: instancia FastAPI criada via create_application()
# - run(): sobe o servidor com uvicorn (script "accounts-app")

from __future__ import annotations

import uvicorn

from accounts_app.config import get_settings
from accounts_app.interfaces.api.app import create_application

app = create_application()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "accounts_app.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
    )


if __name__ == "__main__":
    run()
