from __future__ import annotations

import logging
import os

import uvicorn

from app.main import app

logger = logging.getLogger(__name__)


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("CAREER_SIM_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = os.environ.get("CAREER_SIM_HOST", "127.0.0.1")
    port = int(os.environ.get("CAREER_SIM_PORT", "8000"))
    logger.info("starting career sim server on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
