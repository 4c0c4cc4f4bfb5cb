"""API routes."""

from fastapi import APIRouter

from cemse.api.routes import auth, company, joboffer, municipality

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(company.router, prefix="/company", tags=["Companies"])
api_router.include_router(joboffer.router, prefix="/joboffer", tags=["Job Offers"])
api_router.include_router(municipality.router, prefix="/municipality", tags=["Municipalities"])
