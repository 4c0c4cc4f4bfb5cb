"""Request payload and credential builders for tests."""

from cemse.config import settings
from cemse.core.security import KeyRing, create_access_token
from cemse.models import User

DEFAULT_PASSWORD = "Password123!"


def token_for(user: User, **claims) -> str:
    return create_access_token({"sub": user.id, **claims}, key_ring=KeyRing.from_settings(settings))


def company_payload(**overrides) -> dict:
    payload = {
        "name": "Tech Solutions Bolivia",
        "email": "contacto@techsolutions.bo",
        "municipalityId": "municipality_1",
        "username": "techsolutions",
        "password": "S3cure-pass",
        "description": "Software development",
        "businessSector": "Technology",
        "companySize": "SMALL",
        "foundedYear": 2015,
        "website": "https://techsolutions.bo",
        "phone": "+591 4 4444444",
        "address": "Av. America 123",
    }
    payload.update(overrides)
    return payload


def job_offer_payload(company_id: str, **overrides) -> dict:
    payload = {
        "title": "Desarrollador Backend",
        "description": "Build and maintain APIs",
        "requirements": "Python, SQL",
        "location": "Cochabamba",
        "category": "Tecnologia",
        "contractType": "FULL_TIME",
        "workSchedule": "Lunes a Viernes 08:00-16:00",
        "workModality": "HYBRID",
        "experienceLevel": "ENTRY_LEVEL",
        "municipality": "Cochabamba",
        "companyId": company_id,
        "skillsRequired": ["Python", "FastAPI"],
        "benefits": ["Seguro de salud"],
        "salaryMin": 4000,
        "salaryMax": 7000,
    }
    payload.update(overrides)
    return payload
