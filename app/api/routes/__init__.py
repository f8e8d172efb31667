"""
API Routes
"""
from fastapi import APIRouter

from app.api.routes.users import router as users_router
from app.api.routes.brands import router as brands_router
from app.api.routes.services import router as services_router
from app.api.routes.stations import router as stations_router
from app.api.routes.reviews import router as reviews_router
from app.api.routes.wishlist import router as wishlist_router
from app.api.routes.transactions import router as transactions_router

router = APIRouter()

router.include_router(users_router, tags=["users"])
router.include_router(brands_router, prefix="/brands", tags=["brands"])
router.include_router(services_router, prefix="/services", tags=["services"])
router.include_router(stations_router, prefix="/spbu", tags=["spbu"])
# Mixes /reviews/* with /spbu/{id}/reviews and /spbu/{id}/rating
router.include_router(reviews_router, tags=["reviews"])
router.include_router(wishlist_router, prefix="/wishlist", tags=["wishlist"])
router.include_router(transactions_router, prefix="/transactions", tags=["transactions"])
