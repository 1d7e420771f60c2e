"""
通用工具函数 - 提供空值检查、字段兼容等公共函数

避免在多个 service 中重复定义相同的逻辑
"""
from typing import Mapping, Optional

# CSV 导出里表示"没有值"的占位文本
NULL_TEXT = "NULL"

# 头像配色（按 uid 哈希固定取色）
AVATAR_COLORS = (
    "#3b82f6",  # blue
    "#22c55e",  # green
    "#a855f7",  # purple
    "#f97316",  # orange
    "#ec4899",  # pink
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#ef4444",  # red
)


def is_blank(value: Optional[str]) -> bool:
    """None 或去掉首尾空白后为空字符串"""
    return value is None or value.strip() == ""


def is_null_text(value: str) -> bool:
    """
    检查值是否是导出工具写入的 "NULL" 占位（大小写不敏感）

    Args:
        value: 已经 strip 过的字符串
    """
    return value.upper() == NULL_TEXT


def has_text(value: Optional[str]) -> bool:
    """非空且不是 NULL 占位"""
    return not is_blank(value) and not is_null_text(value.strip())


def resolve_user_id(row: Mapping[str, Optional[str]]) -> Optional[str]:
    """
    兼容新旧两种字段名取用户 ID：user_id 非空优先，否则退回 uid

    注意这里不做 strip，" " 也算 user_id 有值，调用方自行判断
    """
    user_id = row.get("user_id")
    if user_id:
        return user_id
    return row.get("uid")


def avatar_color(uid: str) -> str:
    """
    根据 uid 生成固定的头像颜色

    hash = c + ((hash << 5) - hash)，按有符号 32 位整数回绕
    """
    value = 0
    for ch in uid or "":
        value = (ord(ch) + ((value << 5) - value)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return AVATAR_COLORS[abs(value) % len(AVATAR_COLORS)]
