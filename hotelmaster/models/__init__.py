# ORM Models
from hotelmaster.models.ontology import (
    Room, Customer, Reservation, User, Setting, AuditLog
)

__all__ = [
    'Room', 'Customer', 'Reservation', 'User', 'Setting', 'AuditLog'
]
