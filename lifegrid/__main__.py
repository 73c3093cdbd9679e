"""Start command: ``python -m lifegrid``."""

import uvicorn

from lifegrid.config.infra_settings import get_infra_settings


def main() -> None:
    settings = get_infra_settings()
    uvicorn.run(
        "lifegrid.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
