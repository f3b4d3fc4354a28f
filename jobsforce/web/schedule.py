"""Schedule routes: scheduler and background writer diagnostics."""

from fastapi import APIRouter, Depends

from jobsforce.scheduler import get_next_run_time, get_scheduler_info
from jobsforce.services import Services

from .dependencies import get_services

router = APIRouter(prefix="/api/scheduler")


@router.get("")
def scheduler_debug(services: Services = Depends(get_services)):
    """Diagnostic endpoint: shows scheduler state."""
    info = get_scheduler_info()
    next_run = get_next_run_time()
    info["next_sync"] = next_run.isoformat() if next_run else None
    info["writer"] = services.writer.stats()
    return info
