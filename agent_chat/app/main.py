import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from agent_chat.app.api.routes import api_router
from agent_chat.app.services.llm_client import ModelInvocationError
from agent_chat.app.services.message_normalizer import ContentValidationError

logger = logging.getLogger(__name__)


async def validation_exception_handler(request, exc: RequestValidationError):
    job_id = str(uuid.uuid4())
    details = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", []) if part is not None)
        msg = err.get("msg", "Invalid value")
        details.append({"field": loc or None, "message": msg})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "validation_error",
            "message": "Invalid request payload.",
            "details": details,
            "job_id": job_id,
        },
    )


async def content_exception_handler(request: Request, exc: ContentValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error_code": exc.error_code, "message": exc.message},
    )


async def model_exception_handler(request: Request, exc: ModelInvocationError):
    logger.error("Model invocation failed for %s: %s", request.url.path if request else None, exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error_code": "model_invocation_failed", "message": "Chat model request failed."},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Agent Chat", version="0.1.0")
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ContentValidationError, content_exception_handler)
    app.add_exception_handler(ModelInvocationError, model_exception_handler)
    app.include_router(api_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
