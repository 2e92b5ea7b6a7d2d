"""API v1 router aggregation."""

from fastapi import APIRouter

from qrpass.api.v1 import tokens

api_router = APIRouter()

api_router.include_router(tokens.router, tags=["Tokens"])
