"""Run the relay with uvicorn: ``python -m matterbar``."""

import uvicorn

from matterbar.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "matterbar.app:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
