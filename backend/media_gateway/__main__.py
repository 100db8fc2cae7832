from __future__ import annotations

import uvicorn

from media_gateway.core.config import settings


def main() -> None:
    uvicorn.run(
        "media_gateway.main:app",
        host=str(settings.host),
        port=int(settings.port),
        log_level=str(settings.log_level or "info").lower(),
    )


if __name__ == "__main__":
    main()
