# src/combatstats/__main__.py

"""Run the API with uvicorn: ``python -m combatstats``."""

import logging

import uvicorn

from combatstats import config


def main() -> None:
    logging.basicConfig(
        level=logging.DEBUG if config.is_development() else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "combatstats.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.is_development(),
    )


if __name__ == "__main__":
    main()
