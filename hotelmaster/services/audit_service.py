"""
审计日志服务
由接口层在核心操作成功后调用；写入失败只记录错误日志，不影响请求结果
"""
from typing import Any, Dict, List, Optional
import json
import logging
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from hotelmaster.models.ontology import AuditLog
from hotelmaster.security.context import OperatorContext

logger = logging.getLogger(__name__)


def _dump(values: Optional[Dict[str, Any]]) -> Optional[str]:
    if values is None:
        return None
    return json.dumps(values, default=str, ensure_ascii=False)


class AuditService:
    """审计日志服务"""

    def __init__(self, db: Session):
        self.db = db

    def log(self, action: str, entity_type: Optional[str] = None,
            entity_id: Optional[int] = None,
            old_values: Optional[Dict[str, Any]] = None,
            new_values: Optional[Dict[str, Any]] = None,
            context: Optional[OperatorContext] = None) -> Optional[AuditLog]:
        """
        记录一条审计日志

        Returns:
            写入的日志；数据库写入失败时返回 None
        """
        entry = AuditLog(
            user_id=context.user_id if context else None,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            old_values=_dump(old_values),
            new_values=_dump(new_values),
            ip_address=context.ip_address if context else None,
        )
        try:
            self.db.add(entry)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to write audit log: action={action} entity={entity_type}:{entity_id}: {e}")
            return None
        return entry

    def get_logs(self, limit: int = 50, offset: int = 0,
                 entity_type: Optional[str] = None,
                 entity_id: Optional[int] = None) -> List[AuditLog]:
        """查询审计日志（最新在前）"""
        query = self.db.query(AuditLog)
        if entity_type:
            query = query.filter(AuditLog.entity_type == entity_type)
        if entity_id is not None:
            query = query.filter(AuditLog.entity_id == entity_id)
        return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).offset(offset).limit(limit).all()
