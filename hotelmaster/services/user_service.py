"""
用户服务 - 管理 User 对象和认证
"""
from typing import Optional
from datetime import datetime
import logging
from sqlalchemy.orm import Session
from hotelmaster.config import settings
from hotelmaster.models.ontology import User, UserRole
from hotelmaster.security.auth import get_password_hash, verify_password
from hotelmaster.exceptions import DuplicateError

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        """根据用户名获取用户"""
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, username: str, password: str, full_name: str,
                    role: UserRole, email: Optional[str] = None) -> User:
        """创建用户"""
        if self.get_user_by_username(username):
            raise DuplicateError(f"用户名 '{username}' 已存在")

        user = User(
            username=username,
            password_hash=get_password_hash(password),
            full_name=full_name,
            email=email,
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """验证用户名密码，成功时记录最后登录时间；停用账号视为失败"""
        user = self.get_user_by_username(username)
        if not user or not user.is_active:
            return None
        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed for user: {username}")
            return None

        user.last_login = datetime.utcnow()
        self.db.commit()
        return user

    def seed_default_admin(self) -> Optional[User]:
        """没有任何用户时创建默认管理员"""
        if self.db.query(User).count() > 0:
            return None
        user = self.create_user(
            username=settings.DEFAULT_ADMIN_USERNAME,
            password=settings.DEFAULT_ADMIN_PASSWORD,
            full_name="Administrator",
            role=UserRole.ADMIN,
        )
        logger.info(f"Default admin account created: {user.username}")
        return user
