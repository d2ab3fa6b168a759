"""Server entrypoint: `python -m src.main` or `uvicorn src.main:app`."""

import uvicorn

from src.api.app import create_app
from src.core.config import get_settings

app = create_app()


def main() -> None:
    settings = get_settings()
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
