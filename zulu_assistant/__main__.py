import uvicorn

from zulu_assistant.config import settings


def main() -> None:
    uvicorn.run("zulu_assistant.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    main()
