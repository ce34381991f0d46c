"""API Routers for LodgeFlow."""

from app.routers.leads import router as leads_router
from app.routers.residents import router as residents_router
from app.routers.studios import router as studios_router
from app.routers.invoices import router as invoices_router
from app.routers.invoices import payment_plans_router

__all__ = [
    "leads_router",
    "residents_router",
    "studios_router",
    "invoices_router",
    "payment_plans_router",
]
