import logging
import secrets

from fastapi import HTTPException, Request

log = logging.getLogger("api")


def require_bearer(request: Request):
    header = request.headers.get("authorization", "")
    token = header[len("Bearer "):] if header.startswith("Bearer ") else ""
    if not token:
        log.warning("Unauthorized request: missing Bearer token")
        raise HTTPException(status_code=401, detail="Unauthorized")
    expected = request.app.state.api_token
    if not secrets.compare_digest(token.encode(), expected.encode()):
        log.warning("Unauthorized request: invalid API token")
        raise HTTPException(status_code=401, detail="Unauthorized")
