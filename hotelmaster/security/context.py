"""
hotelmaster/security/context.py

操作人上下文 - 由接口层根据登录用户构建，显式传入编排服务
"""
from typing import Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class OperatorContext:
    """
    操作人上下文

    Attributes:
        user_id: 用户ID（写入预订 created_by）
        username: 用户名
        role: 角色（admin / receptionist / housekeeping）
        ip_address: 客户端IP地址
    """

    user_id: Optional[int]
    username: Optional[str] = None
    role: Optional[str] = None
    ip_address: Optional[str] = None

    def __repr__(self) -> str:
        return f"OperatorContext(user_id={self.user_id}, username={self.username!r}, role={self.role!r})"


__all__ = ["OperatorContext"]
