import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from zocpos.errors import is_connection_error

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    return {"ok": True}


@router.get("/api/test-db")
def test_db(request: Request):
    env = request.app.state.settings.APP_ENV
    try:
        request.app.state.db.ping()
    except SQLAlchemyError as e:
        logger.error("database check failed: %s", e)
        message = "Database connection failed" if is_connection_error(e) else "Database query failed"
        return JSONResponse(status_code=500, content={"success": False, "message": message, "environment": env})
    return {"success": True, "message": "Database connection successful", "environment": env}
