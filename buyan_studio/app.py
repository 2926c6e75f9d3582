from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from buyan_studio import config
from buyan_studio.boundary import LocalBoundary
from buyan_studio.protocol import PageUnloading
from buyan_studio.routes import router
from buyan_studio.runtime import Studio, init_studio
from buyan_studio.storage import Storage


def create_app(data_dir: Path | None = None) -> FastAPI:
    storage = Storage(data_dir or config.DATA_DIR, prefix=config.STORAGE_PREFIX)
    studio = init_studio(Studio(LocalBoundary(storage)))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await studio.start()
        yield
        # Same as the browser's beforeunload: persist the model on the way out
        await studio.send(PageUnloading())

    app = FastAPI(title="Buyan Studio", lifespan=lifespan)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
