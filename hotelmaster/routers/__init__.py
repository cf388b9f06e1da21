# API Routers
from hotelmaster.routers import auth, rooms, customers, reservations, dashboard, settings

__all__ = ['auth', 'rooms', 'customers', 'reservations', 'dashboard', 'settings']
