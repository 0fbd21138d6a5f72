from fastapi import APIRouter

from approvals.api.audit import audit_router
from approvals.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(audit_router)
