"""Run the service with uvicorn: `python -m app`."""

import uvicorn

from app.config import get_settings


def main():
    settings = get_settings()
    # log_config=None leaves the JSON logging from app.logging_config in charge
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
