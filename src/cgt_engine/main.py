"""Entrypoint: run the capital-gains-tax answer engine server."""

import uvicorn

from cgt_engine.api.app import create_app
from cgt_engine.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
