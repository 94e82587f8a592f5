from pathlib import Path

from fastapi import FastAPI

from random_tables.config import Services, Settings, build_services
from random_tables.routes import router


def create_app(services: Services | None = None, data_dir: Path | None = None) -> FastAPI:
    if services is None:
        settings = Settings.from_env()
        if data_dir is not None:
            settings = settings.model_copy(update={"data_dir": data_dir})
        services = build_services(settings)

    app = FastAPI(title="Random Tables")
    app.state.services = services
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (reads DATA_DIR and friends from the environment)
app = create_app()
