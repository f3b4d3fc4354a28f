"""Listing browse routes."""

from fastapi import APIRouter, Depends, HTTPException, Request

from jobsforce.services import Services

from .dependencies import get_services, int_param

router = APIRouter(prefix="/api/jobs")


@router.get("")
def list_jobs(request: Request, services: Services = Depends(get_services)):
    page = int_param(request, "page", 1)
    limit = int_param(request, "limit", 10)
    raw_skills = request.query_params.get("skills", "")
    skills = [s.strip() for s in raw_skills.split(",") if s.strip()]

    jobs, total = services.store.browse(
        search=request.query_params.get("search") or None,
        location=request.query_params.get("location") or None,
        skills=skills or None,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "count": len(jobs),
        "total": total,
        "pagination": {
            "page": page,
            "limit": limit,
            "pages": (total + limit - 1) // limit,
        },
        "data": [job.to_dict() for job in jobs],
    }


@router.get("/{job_id}")
def get_job(job_id: int, services: Services = Depends(get_services)):
    job = services.store.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return {"success": True, "data": job.to_dict()}
