import logging
from textwrap import dedent

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from upload_relay.config.settings import Settings
from upload_relay.errors import (
    UploadRelayError,
    handle_broad_exceptions,
    handle_pydantic_validation_errors,
    handle_upload_relay_errors,
)
from upload_relay.ledger import AuditLedger
from upload_relay.routers.health import router as health_router
from upload_relay.routers.uploads import router as uploads_router
from upload_relay.services.upload_service import UploadService
from upload_relay.storage import ObjectStore, ObjectStoreFactory

# Set up logging
logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(settings: Settings | None = None, store: ObjectStore | None = None) -> FastAPI:
    """Create a FastAPI application.

    The object store, ledger and upload service are built once here and
    shared by every request.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Upload Relay",
        summary="Relay uploaded files to an object store and record them in a shared ledger",
        version="v1",
        description=dedent(
            """\
        Files posted to `POST /upload` are stored in the configured backend
        (`local`, `s3` or `drive`) and recorded as one row in the
        `file-uploads-tracker.xlsx` ledger.
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
    )

    # added before CORS so CORS stays the outermost layer
    app.middleware("http")(handle_broad_exceptions)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store = store or ObjectStoreFactory.get_object_store(settings)
    ledger = AuditLedger(store, settings.ledger_file_name)
    app.state.settings = settings
    app.state.upload_service = UploadService(
        store=store,
        ledger=ledger,
        max_upload_bytes=settings.max_upload_bytes,
        key_prefix=settings.key_prefix,
        tmp_dir=settings.upload_tmp_dir,
        make_public=settings.make_public,
    )
    logger.info(f"Upload relay using the {store.name} backend")

    app.include_router(uploads_router, tags=["uploads"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=UploadRelayError,
        handler=handle_upload_relay_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=3001)
