# Business Services
from hotelmaster.services.room_service import RoomService
from hotelmaster.services.availability_service import AvailabilityService
from hotelmaster.services.reservation_service import ReservationService
from hotelmaster.services.customer_service import CustomerService
from hotelmaster.services.lifecycle_service import ReservationLifecycleService
from hotelmaster.services.report_service import ReportService
from hotelmaster.services.settings_service import SettingsService
from hotelmaster.services.audit_service import AuditService
from hotelmaster.services.user_service import UserService

__all__ = [
    'RoomService', 'AvailabilityService', 'ReservationService', 'CustomerService',
    'ReservationLifecycleService', 'ReportService', 'SettingsService', 'AuditService',
    'UserService',
]
