from __future__ import annotations

import uvicorn

from udf_proxy.config import Settings
from udf_proxy.main import create_app


def run() -> None:
    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
