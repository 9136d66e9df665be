"""API v1 router aggregating all endpoints."""

from fastapi import APIRouter

from app.api.v1 import (
    health,
    integrations,
    leads,
    me,
    outcomes,
    pcp,
    referrals,
    routing,
    tracking,
)

api_router = APIRouter()

# Health check
api_router.include_router(
    health.router,
    prefix="/health",
    tags=["health"],
)

# Email open/click tracking
api_router.include_router(
    tracking.router,
    prefix="/track",
    tags=["tracking"],
)

# Referral decision emails
api_router.include_router(
    referrals.router,
    prefix="/referrals",
    tags=["referrals"],
)

# Integration configuration
api_router.include_router(
    integrations.router,
    prefix="/integrations",
    tags=["integrations"],
)

# Signed-in user
api_router.include_router(
    me.router,
    prefix="/me",
    tags=["me"],
)

# Leads
api_router.include_router(
    leads.router,
    prefix="/leads",
    tags=["leads"],
)

# Routing helpers
api_router.include_router(
    routing.router,
    prefix="/routing",
    tags=["routing"],
)

# Outcomes and MCID
api_router.include_router(
    outcomes.router,
    prefix="/outcomes",
    tags=["outcomes"],
)

# PCP lookup
api_router.include_router(
    pcp.router,
    prefix="/pcp",
    tags=["pcp"],
)
