"""
系统设置路由（仅管理员）
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelmaster.database import get_db
from hotelmaster.models.ontology import User
from hotelmaster.models.schemas import SettingsUpdate, SettingsResponse
from hotelmaster.services.settings_service import SettingsService
from hotelmaster.services.audit_service import AuditService
from hotelmaster.security.auth import require_permission, get_operator_context
from hotelmaster.security.context import OperatorContext
from hotelmaster.security.permissions import SETTINGS_VIEW, SETTINGS_EDIT
from hotelmaster.exceptions import error_detail

router = APIRouter(prefix="/settings", tags=["系统设置"])


@router.get("", response_model=SettingsResponse)
def get_settings(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(SETTINGS_VIEW))
):
    """获取全部设置"""
    service = SettingsService(db)
    values = service.all()
    values.setdefault('hotel_name', service.hotel_name())
    values.setdefault('check_in_time', service.check_in_time())
    values.setdefault('check_out_time', service.check_out_time())
    return SettingsResponse(settings=values)


@router.put("", response_model=SettingsResponse)
def update_settings(
    data: SettingsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_permission(SETTINGS_EDIT)),
    context: OperatorContext = Depends(get_operator_context)
):
    """批量更新设置"""
    service = SettingsService(db)
    old_values = service.all()
    try:
        for item in data.settings:
            service.set(item.key, item.value, item.type)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error_detail(e))

    new_values = service.all()
    AuditService(db).log('settings.update', 'settings', None,
                         old_values={item.key: old_values.get(item.key) for item in data.settings},
                         new_values={item.key: new_values.get(item.key) for item in data.settings},
                         context=context)
    return SettingsResponse(settings=new_values)
