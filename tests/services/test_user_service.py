"""
用户服务测试
"""
import pytest

from hotelmaster.models.ontology import User, UserRole
from hotelmaster.services.user_service import UserService
from hotelmaster.exceptions import DuplicateError


class TestUserService:
    def test_authenticate(self, db_session, admin_user):
        user = UserService(db_session).authenticate("admin", "123456")
        assert user.id == admin_user.id
        assert user.last_login is not None

    def test_wrong_password(self, db_session, admin_user):
        assert UserService(db_session).authenticate("admin", "wrong") is None

    def test_inactive_user(self, db_session, admin_user):
        admin_user.is_active = False
        db_session.commit()
        assert UserService(db_session).authenticate("admin", "123456") is None

    def test_duplicate_username(self, db_session, admin_user):
        with pytest.raises(DuplicateError):
            UserService(db_session).create_user("admin", "x", "Another", UserRole.RECEPTIONIST)

    def test_seed_default_admin_once(self, db_session):
        service = UserService(db_session)
        user = service.seed_default_admin()
        assert user.role == UserRole.ADMIN
        assert service.seed_default_admin() is None
        assert db_session.query(User).count() == 1
