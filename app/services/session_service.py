"""
看板会话状态

保存当前数据集、选中的房间、用户筛选、房间列表排序方向和最后一条错误提示。
每次上传整体替换数据集；出错时清空数据集，只保留错误提示。
"""
from typing import List, Optional

from fastapi import Request, UploadFile
from loguru import logger

from app.core.exceptions import DashboardError
from app.schemas.room import Dataset, RoomOrder, RoomView, SortDirection
from app.services import dataset_service, room_service, upload_service, user_index_service


class DashboardSession:
    def __init__(self):
        self.dataset: Optional[Dataset] = None
        self.selected_room_id: Optional[str] = None
        self.filter_user_id: Optional[str] = None
        self.filtered_room_ids: List[str] = []
        self.sort_direction: SortDirection = SortDirection.ASC
        self.error: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return self.dataset is not None

    def reset(self) -> None:
        self.dataset = None
        self.selected_room_id = None
        self.filter_user_id = None
        self.filtered_room_ids = []
        self.sort_direction = SortDirection.ASC
        self.error = None

    def load(self, dataset: Dataset) -> None:
        self.reset()
        self.dataset = dataset
        logger.info(
            f"[数据集] 加载完成: source={dataset.source_name}, "
            f"总数={dataset.stats.total}, 去重后={dataset.stats.unique}, 重复={dataset.stats.duplicates}"
        )

    def fail(self, message: str) -> None:
        self.reset()
        self.error = message
        logger.warning(f"[数据集] 上传失败: {message}")

    def rooms(self, direction: Optional[SortDirection] = None) -> List[RoomOrder]:
        if self.dataset is None:
            return []
        if direction is not None:
            self.sort_direction = direction
        return dataset_service.rooms_with_order(self.dataset, self.sort_direction)

    def select_room(self, room_id: str) -> RoomView:
        records = self.dataset.records if self.dataset else []
        self.selected_room_id = room_id
        view = room_service.build_room_view(records, room_id)
        logger.info(f"[房间] 选中 {room_id}: 行数={view.totalRows}, 聊天={len(view.chatMessages)}")
        return view

    def filter_by_user(self, user_id: Optional[str]) -> List[str]:
        """按用户筛选房间，传空清除筛选"""
        if not user_id:
            self.filter_user_id = None
            self.filtered_room_ids = []
            return []
        records = self.dataset.records if self.dataset else []
        self.filter_user_id = user_id
        self.filtered_room_ids = user_index_service.find_rooms_by_user(records, user_id)
        logger.info(f"[筛选] 用户 {user_id} 参与了 {len(self.filtered_room_ids)} 个房间")
        return self.filtered_room_ids

    async def ingest_upload(self, upload: UploadFile) -> Dataset:
        """
        处理一次上传：类型校验 -> 读取 -> 解析 -> 加载

        任意一步失败都会清空当前数据集并记录错误，然后继续抛出
        """
        # 选了新文件就先丢掉旧数据
        self.reset()
        try:
            upload_service.check_file_type(upload.filename, upload.content_type)
            result = await upload_service.read_upload(upload)
            text = upload_service.unwrap_read_result(result)
            records = upload_service.parse_records(text)
            dataset = dataset_service.load_dataset(records, source_name=upload.filename)
        except DashboardError as e:
            self.fail(e.message)
            raise
        self.load(dataset)
        return dataset


def get_session(request: Request) -> DashboardSession:
    """依赖项函数：取应用级的会话对象"""
    session = getattr(request.app.state, "session", None)
    if session is None:
        session = DashboardSession()
        request.app.state.session = session
    return session
