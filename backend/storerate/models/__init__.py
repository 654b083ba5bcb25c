# Importing the package registers every table with Base.metadata
from storerate.models.user import User, UserRole
from storerate.models.store import Store
from storerate.models.rating import Rating

__all__ = ["User", "UserRole", "Store", "Rating"]
