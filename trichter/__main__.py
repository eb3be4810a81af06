import uvicorn

from trichter.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "trichter.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
