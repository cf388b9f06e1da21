"""
集中定义所有权限码常量，以及角色到权限的映射
"""
from typing import Dict, FrozenSet

from hotelmaster.models.ontology import UserRole

# 房间管理
ROOMS_VIEW = "rooms.view"
ROOMS_CREATE = "rooms.create"
ROOMS_EDIT = "rooms.edit"
ROOMS_DELETE = "rooms.delete"
ROOMS_CHANGE_STATUS = "rooms.change_status"

# 预订管理
RESERVATIONS_VIEW = "reservations.view"
RESERVATIONS_CREATE = "reservations.create"
RESERVATIONS_EDIT = "reservations.edit"
RESERVATIONS_DELETE = "reservations.delete"

# 入住/退房
RESERVATIONS_CHECKIN = "reservations.checkin"
RESERVATIONS_CHECKOUT = "reservations.checkout"

# 客人管理
CUSTOMERS_VIEW = "customers.view"
CUSTOMERS_CREATE = "customers.create"
CUSTOMERS_EDIT = "customers.edit"
CUSTOMERS_DELETE = "customers.delete"

# 报表
REPORTS_VIEW = "reports.view"

# 设置
SETTINGS_VIEW = "settings.view"
SETTINGS_EDIT = "settings.edit"

# 审计
AUDIT_LOG_VIEW = "audit_log.view"


ALL_PERMISSIONS: FrozenSet[str] = frozenset({
    ROOMS_VIEW, ROOMS_CREATE, ROOMS_EDIT, ROOMS_DELETE, ROOMS_CHANGE_STATUS,
    RESERVATIONS_VIEW, RESERVATIONS_CREATE, RESERVATIONS_EDIT, RESERVATIONS_DELETE,
    RESERVATIONS_CHECKIN, RESERVATIONS_CHECKOUT,
    CUSTOMERS_VIEW, CUSTOMERS_CREATE, CUSTOMERS_EDIT, CUSTOMERS_DELETE,
    REPORTS_VIEW, SETTINGS_VIEW, SETTINGS_EDIT, AUDIT_LOG_VIEW,
})

ROLE_PERMISSIONS: Dict[UserRole, FrozenSet[str]] = {
    UserRole.ADMIN: ALL_PERMISSIONS,
    UserRole.RECEPTIONIST: frozenset({
        ROOMS_VIEW, ROOMS_CHANGE_STATUS,
        RESERVATIONS_VIEW, RESERVATIONS_CREATE, RESERVATIONS_EDIT, RESERVATIONS_DELETE,
        RESERVATIONS_CHECKIN, RESERVATIONS_CHECKOUT,
        CUSTOMERS_VIEW, CUSTOMERS_CREATE, CUSTOMERS_EDIT,
        REPORTS_VIEW,
    }),
    UserRole.HOUSEKEEPING: frozenset({
        ROOMS_VIEW, ROOMS_CHANGE_STATUS,
        RESERVATIONS_VIEW,
    }),
}


def has_permission(role, permission: str) -> bool:
    """检查角色是否拥有权限码"""
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
