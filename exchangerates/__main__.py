import uvicorn

from .core.config import get_settings
from .main import create_app


def main() -> None:
    settings = get_settings()
    app = create_app(settings)
    # logging is configured by create_app; keep uvicorn from replacing it
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
