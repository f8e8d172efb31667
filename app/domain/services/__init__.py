"""
Domain Services
"""
from app.domain.services.user_service import UserService
from app.domain.services.catalog_service import CatalogService
from app.domain.services.station_service import StationService
from app.domain.services.review_service import ReviewService
from app.domain.services.wishlist_service import WishlistService
from app.domain.services.transaction_service import TransactionService

__all__ = [
    "UserService",
    "CatalogService",
    "StationService",
    "ReviewService",
    "WishlistService",
    "TransactionService",
]
