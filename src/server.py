import uvicorn

from api.app import create_app
from utils.config import get_settings

app = create_app()


def run():
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
