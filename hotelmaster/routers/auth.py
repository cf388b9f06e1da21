"""
认证路由
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelmaster.database import get_db
from hotelmaster.models.schemas import LoginRequest, LoginResponse
from hotelmaster.models.ontology import User
from hotelmaster.services.user_service import UserService
from hotelmaster.security.auth import get_current_user, create_access_token
from hotelmaster.security.permissions import ROLE_PERMISSIONS

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """用户登录"""
    service = UserService(db)
    user = service.authenticate(data.username, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户名或密码错误"
        )
    return LoginResponse(
        access_token=create_access_token(user.id, user.role),
        user_id=user.id,
        username=user.username,
        full_name=user.full_name,
        role=user.role,
    )


@router.get("/me")
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """获取当前用户信息"""
    return {
        'id': current_user.id,
        'username': current_user.username,
        'full_name': current_user.full_name,
        'email': current_user.email,
        'role': current_user.role,
        'is_active': current_user.is_active,
        'permissions': sorted(ROLE_PERMISSIONS.get(current_user.role, ())),
    }
