"""Manual check trigger."""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..config import settings
from ..schemas.status import RunCheckResponse
from ..services.checker import CheckerService, get_checker
from ..services.store import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checks", tags=["checks"])


@router.post("/run", response_model=RunCheckResponse)
async def run_check(checker: CheckerService = Depends(get_checker)):
    """Run a probe cycle now, alongside the scheduled ones."""
    try:
        ok = await checker.run_check()
    except StoreError as e:
        logger.error(f"run-check error: {e}")
        return JSONResponse(status_code=500, content={"ok": False, "message": "error"})
    return RunCheckResponse(
        ok=ok,
        message=f"{settings.target_name} responded (UP)" if ok else "No response (DOWN)",
    )
