"""
审计日志服务测试
"""
import json
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from hotelmaster.models.ontology import AuditLog
from hotelmaster.services.audit_service import AuditService


class TestAuditService:
    def test_log_entry(self, db_session, operator):
        entry = AuditService(db_session).log(
            'reservation.checkin', 'reservation', 7,
            old_values={'status': 'confirmed'}, new_values={'status': 'checked_in'},
            context=operator,
        )
        assert entry.id is not None
        assert entry.user_id == operator.user_id
        assert entry.ip_address == "127.0.0.1"
        assert json.loads(entry.new_values) == {'status': 'checked_in'}

    def test_get_logs_filters(self, db_session, operator):
        service = AuditService(db_session)
        service.log('room.create', 'room', 1, context=operator)
        service.log('customer.create', 'customer', 1, context=operator)
        logs = service.get_logs(entity_type='room')
        assert [log.action for log in logs] == ['room.create']

    def test_write_failure_is_swallowed_and_logged(self, db_session, operator, caplog):
        service = AuditService(db_session)
        error = OperationalError("INSERT", {}, Exception("database is locked"))
        with patch.object(db_session, "commit", side_effect=error):
            assert service.log('room.delete', 'room', 1, context=operator) is None
        assert "Failed to write audit log" in caplog.text
        assert db_session.query(AuditLog).count() == 0
