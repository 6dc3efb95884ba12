from fastapi import APIRouter

from mbo_platform.api.v1.endpoints import (
    assignments,
    catalog,
    dictionary,
    documents,
    health,
    objectives,
    org_chart,
    profile,
    stats,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(profile.router, tags=["profile"])
api_router.include_router(users.router, tags=["users"])
api_router.include_router(catalog.router, tags=["catalog"])
api_router.include_router(dictionary.router, tags=["dictionary"])
api_router.include_router(objectives.router, tags=["objectives"])
api_router.include_router(assignments.router, tags=["assignments"])
api_router.include_router(documents.router, tags=["documents"])
api_router.include_router(stats.router, tags=["analytics"])
api_router.include_router(org_chart.router, tags=["org-chart"])
