from fastapi import APIRouter

from .endpoints import accounts, journal_entries, invoices, counterparties, projects, insights, reports, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(accounts.router, prefix="/accounts", tags=["accounts"])
api_router.include_router(journal_entries.router, prefix="/journal-entries", tags=["journal-entries"])
api_router.include_router(invoices.router, tags=["invoices"])
api_router.include_router(counterparties.router, tags=["counterparties"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(insights.router, prefix="/insights", tags=["insights"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
