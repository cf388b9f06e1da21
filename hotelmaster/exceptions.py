"""
业务异常定义

所有异常都是本地的、不可重试的拒绝条件：服务层直接抛出，由调用方决定如何处理。
继承 ValueError，路由层沿用 `except ValueError` 映射为 400 的惯例。
"""


class HotelError(ValueError):
    """业务异常基类"""

    code = "hotel_error"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class NotFoundError(HotelError):
    """引用的实体不存在"""

    code = "not_found"


class ValidationError(HotelError):
    """输入缺失或格式错误（包括日期先后、数值约束）"""

    code = "validation_error"


class StateError(HotelError):
    """非法的状态转换"""

    code = "invalid_state"


class ConflictError(HotelError):
    """房间在请求区间内不可用，或违反唯一性约束"""

    code = "conflict"


class DuplicateError(ValidationError, ConflictError):
    """唯一字段重复（房间号、客人手机号）"""

    code = "duplicate"


def error_detail(error: Exception):
    """接口层错误响应体：业务异常带上 code，其他异常只返回消息"""
    if isinstance(error, HotelError):
        return error.to_dict()
    return str(error)


__all__ = [
    "HotelError",
    "NotFoundError",
    "ValidationError",
    "StateError",
    "ConflictError",
    "DuplicateError",
    "error_detail",
]
