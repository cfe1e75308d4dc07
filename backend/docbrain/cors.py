"""Cross-origin policy: an explicit allow list plus preview deployments matched by pattern."""
import logging
import re

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docbrain.config import Settings

logger = logging.getLogger(__name__)


class OriginPolicy:

    def __init__(self, origins: list[str], preview_regex: str | None = None):
        self.origins = origins
        self.preview_regex = preview_regex
        self._preview = re.compile(preview_regex) if preview_regex else None

    def allows(self, origin: str | None) -> bool:
        # Requests without an Origin header (curl, server-to-server) are not cross-origin
        if not origin:
            return True
        if origin in self.origins:
            return True
        return bool(self._preview and self._preview.fullmatch(origin))


def install_cors(app: FastAPI, settings: Settings) -> None:
    """Reject disallowed origins outright, then let CORSMiddleware set the headers."""
    policy = OriginPolicy(settings.cors_origins, settings.CORS_PREVIEW_ORIGIN_REGEX or None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=policy.origins,
        allow_origin_regex=policy.preview_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # Registered after CORSMiddleware so it runs first
    @app.middleware("http")
    async def reject_disallowed_origin(request: Request, call_next):
        origin = request.headers.get("origin")
        if not policy.allows(origin):
            logger.warning("CORS blocked origin: %s (allowed: %s)", origin, policy.origins)
            return JSONResponse(status_code=403, content={"error": "Not allowed by CORS"})
        return await call_next(request)
