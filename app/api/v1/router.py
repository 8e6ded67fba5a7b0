"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, accounts, companies, subscriptions, users

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(companies.router, prefix="/companies", tags=["Companies"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["Subscriptions"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
