# app/services/dataset_service.py
from typing import List, Optional, Sequence

from app.core.exceptions import EmptyParsedDatasetError, MissingRequiredFieldError
from app.schemas.room import Dataset, DatasetStats, Record, RoomOrder, SortDirection

REQUIRED_FIELD = "room_id"


def load_dataset(records: Sequence[Record], source_name: Optional[str] = None) -> Dataset:
    """
    校验解析结果并计算全局统计

    - 记录为空 -> EmptyParsedDatasetError
    - 第一行没有 room_id（或值为空）-> MissingRequiredFieldError
    - order 从 1 开始，按 room_id 首次出现的顺序分配
    """
    if not records:
        raise EmptyParsedDatasetError()
    if not records[0].get(REQUIRED_FIELD):
        raise MissingRequiredFieldError(REQUIRED_FIELD)

    all_room_ids = [
        row[REQUIRED_FIELD]
        for row in records
        if row.get(REQUIRED_FIELD) and row[REQUIRED_FIELD].strip() != ""
    ]
    # dict 保持插入顺序，等价于按首次出现去重
    unique_room_ids = list(dict.fromkeys(all_room_ids))

    stats = DatasetStats(
        total=len(all_room_ids),
        unique=len(unique_room_ids),
        duplicates=len(all_room_ids) - len(unique_room_ids),
    )
    rooms = [RoomOrder(room_id=room_id, order=i + 1) for i, room_id in enumerate(unique_room_ids)]

    return Dataset(
        records=[dict(row) for row in records],
        all_room_ids=all_room_ids,
        unique_room_ids=unique_room_ids,
        rooms=rooms,
        stats=stats,
        source_name=source_name,
    )


def rooms_with_order(dataset: Dataset, direction: SortDirection = SortDirection.ASC) -> List[RoomOrder]:
    if direction == SortDirection.DESC:
        return list(reversed(dataset.rooms))
    return list(dataset.rooms)
