# storefront/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from storefront.api import ROUTERS
from storefront.data.database import Base, engine
from storefront.domain.errors import StorefrontError
from storefront.utils.logging import get_logger, setup_logging

# registers every table in Base.metadata
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


async def handle_storefront_error(request: Request, exc: StorefrontError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(create_tables: bool = True) -> FastAPI:
    setup_logging()

    if create_tables:
        logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
        Base.metadata.create_all(bind=engine)

    app = FastAPI(
        title="Storefront Checkout Service",
        version="1.0.0",
    )

    app.add_exception_handler(StorefrontError, handle_storefront_error)

    for router in ROUTERS:
        app.include_router(router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
