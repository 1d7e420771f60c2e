# app/services/user_index_service.py
from typing import List, Optional, Sequence, Set

from app.core.utils import is_blank, resolve_user_id
from app.schemas.room import Record


def find_rooms_by_user(records: Sequence[Record], user_id: Optional[str]) -> List[str]:
    """
    找出某个用户参与过的所有 room_id（去重后按字典序）

    user_id 为空时直接返回空列表
    """
    if is_blank(user_id):
        return []
    target = user_id.strip()

    room_ids: Set[str] = set()
    for row in records:
        row_user_id = resolve_user_id(row)
        if not row_user_id or row_user_id.strip() != target:
            continue
        room_id = row.get("room_id")
        if room_id is not None:
            room_ids.add(room_id)
    return sorted(room_ids)
