import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run(
        "filemaster.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
