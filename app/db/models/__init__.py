"""
Database Models
"""
from app.db.models.user import User
from app.db.models.brand import Brand
from app.db.models.service import Service
from app.db.models.station import Station
from app.db.models.station_service_link import StationServiceLink
from app.db.models.fuel_price import FuelPrice
from app.db.models.review import Review
from app.db.models.wishlist import Wishlist
from app.db.models.transaction import Transaction

__all__ = [
    "User",
    "Brand",
    "Service",
    "Station",
    "StationServiceLink",
    "FuelPrice",
    "Review",
    "Wishlist",
    "Transaction",
]
