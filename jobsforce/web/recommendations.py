"""Per-user routes: recommendations, manual sync and skill updates."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from jobsforce.pipeline import sync_now
from jobsforce.recommendations import RecommendationQuery
from jobsforce.services import Services
from jobsforce.utils.text_processing import parse_skill_list

from .dependencies import float_param, get_services, get_user_or_404, int_param

logger = logging.getLogger("jobsforce.web")

router = APIRouter(prefix="/api/users/{user_id}")


@router.get("/recommendations")
def recommended_jobs(user_id: int, request: Request, services: Services = Depends(get_services)):
    user = get_user_or_404(services, user_id)

    query = RecommendationQuery(
        page=int_param(request, "page", 1),
        limit=int_param(request, "limit", services.config.recommendations.default_limit),
        min_match_score=float_param(request, "minMatchScore", 0.0),
        location=request.query_params.get("location") or None,
        search_term=request.query_params.get("searchTerm") or None,
        refresh=request.query_params.get("refresh") == "true",
    )
    result = services.recommender.recommend(user, query)
    return JSONResponse(result.to_dict(), status_code=200 if result.success else 500)


@router.post("/sync-jobs")
def sync_jobs_for_user(user_id: int, request: Request, services: Services = Depends(get_services)):
    user = get_user_or_404(services, user_id)
    if not user.skills:
        return JSONResponse(
            {"success": False, "error": "No skills found in your profile"}, status_code=400
        )

    limit = int_param(request, "limit", services.config.sync.manual_limit)
    result = sync_now(services, user.skills, limit)
    return {
        "success": result["success"],
        "message": f"Job sync completed: Added {result['added']} jobs, updated {result['updated']} jobs",
        "result": result,
    }


@router.put("/skills")
async def update_skills(user_id: int, request: Request, services: Services = Depends(get_services)):
    get_user_or_404(services, user_id)

    try:
        body = await request.json()
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")

    skills = parse_skill_list(body.get("skills")) if isinstance(body, dict) else None
    if skills is None:
        return JSONResponse(
            {"success": False, "error": "Please provide an array of skills"}, status_code=400
        )

    user = services.users.update_skills(user_id, skills)
    return {"success": True, "user": {"id": user.id, "email": user.email, "skills": user.skills}}
