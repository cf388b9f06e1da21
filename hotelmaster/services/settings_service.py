"""
系统设置服务
键值对存储：value 统一存文本，type 决定读取时的类型转换
"""
from typing import Any, Dict, Optional
import json
import logging
from sqlalchemy.orm import Session
from hotelmaster.config import settings as app_settings
from hotelmaster.models.ontology import Setting
from hotelmaster.exceptions import ValidationError

logger = logging.getLogger(__name__)

SETTING_TYPES = ('string', 'int', 'bool', 'json')

DEFAULT_CHECK_IN_TIME = "14:00"
DEFAULT_CHECK_OUT_TIME = "11:00"

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def cast_value(value: Optional[str], value_type: str) -> Any:
    """按类型还原存储值"""
    if value is None:
        return None
    if value_type == 'int':
        try:
            return int(value)
        except ValueError:
            return 0
    if value_type == 'bool':
        return value.strip().lower() in _TRUE_VALUES
    if value_type == 'json':
        try:
            return json.loads(value)
        except ValueError:
            return None
    return value


def stringify_value(value: Any) -> str:
    """转为存储文本"""
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if value is None:
        return ''
    return str(value)


class SettingsService:
    """系统设置服务"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, key: str) -> Optional[Setting]:
        return self.db.query(Setting).filter(Setting.key == key).first()

    def get(self, key: str, default: Any = None) -> Any:
        """读取设置，不存在时返回默认值"""
        row = self._get_row(key)
        if row is None:
            return default
        return cast_value(row.value, row.type or 'string')

    def set(self, key: str, value: Any, value_type: str = 'string') -> Setting:
        """写入设置（存在则更新）"""
        if value_type not in SETTING_TYPES:
            raise ValidationError(f"不支持的设置类型: {value_type}")

        row = self._get_row(key)
        if row is None:
            row = Setting(key=key)
            self.db.add(row)
        row.value = stringify_value(value)
        row.type = value_type

        self.db.commit()
        self.db.refresh(row)
        logger.info(f"Setting updated: {key} ({value_type})")
        return row

    def all(self) -> Dict[str, Any]:
        """全部设置，已按类型转换"""
        rows = self.db.query(Setting).order_by(Setting.key).all()
        return {row.key: cast_value(row.value, row.type or 'string') for row in rows}

    def delete(self, key: str) -> bool:
        """删除设置；不存在时返回 False"""
        row = self._get_row(key)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    # ============== 常用设置 ==============

    def hotel_name(self) -> str:
        return self.get('hotel_name', app_settings.APP_NAME)

    def check_in_time(self) -> str:
        return self.get('check_in_time', DEFAULT_CHECK_IN_TIME)

    def check_out_time(self) -> str:
        return self.get('check_out_time', DEFAULT_CHECK_OUT_TIME)
