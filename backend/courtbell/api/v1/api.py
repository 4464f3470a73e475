"""
Main API router aggregator
"""
from fastapi import APIRouter

from courtbell.api.v1.endpoints import (
    auth,
    user,
    cases,
    clients,
    juniors,
    transactions,
    legal_tools,
    reminders,
    sse,
    health,
)

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(user.router, prefix="/user", tags=["User"])
api_router.include_router(cases.router, prefix="/cases", tags=["Cases"])
api_router.include_router(clients.router, prefix="/clients", tags=["Clients"])
api_router.include_router(juniors.router, prefix="/juniors", tags=["Juniors"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])
api_router.include_router(legal_tools.router, prefix="/legal-tools", tags=["Legal Tools"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["Reminders"])
api_router.include_router(sse.router, prefix="/sse", tags=["Real-time"])
api_router.include_router(health.router, prefix="/health", tags=["Health"])
