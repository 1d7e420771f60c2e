from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# 一行 CSV：列名 -> 值（行比表头短时缺的列为 None）
Record = Dict[str, Optional[str]]


class MediaItem(BaseModel):
    url: str
    create_time: str = ""


class ChatMessage(BaseModel):
    uid: str
    message: str
    create_time: str = ""
    audioUrl: Optional[str] = None  # 同一 create_time 的音频（去掉查询参数后的地址）


class RoomView(BaseModel):
    """单个房间的只读汇总，每次选中房间都重新计算"""
    room_id: str
    jpgUrls: List[MediaItem] = Field(default_factory=list)
    mp3Urls: List[MediaItem] = Field(default_factory=list)
    chatMessages: List[ChatMessage] = Field(default_factory=list)
    riskLabelNames: List[str] = Field(default_factory=list)
    userIds: List[str] = Field(default_factory=list)
    durationMinutes: int = 0
    totalRows: int = 0


class DatasetStats(BaseModel):
    total: int
    unique: int
    duplicates: int


class RoomOrder(BaseModel):
    room_id: str
    order: int  # 1 开始，按首次出现的顺序分配


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Dataset(BaseModel):
    """一次上传得到的完整数据集，新上传时整体替换"""
    model_config = ConfigDict(frozen=True)

    records: List[Record]
    all_room_ids: List[str]
    unique_room_ids: List[str]
    rooms: List[RoomOrder]
    stats: DatasetStats
    source_name: Optional[str] = None


class ReadStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    ABORTED = "aborted"


class ReadResult(BaseModel):
    """一次性读取文件的结果：成功/失败/中断三选一"""
    status: ReadStatus
    text: Optional[str] = None
    detail: Optional[str] = None  # 失败原因（含错误码）


class UploadResponse(BaseModel):
    status: str = "success"
    source_name: Optional[str] = None
    stats: DatasetStats
    rooms: List[RoomOrder]


class UserRoomsResponse(BaseModel):
    user_id: str
    room_ids: List[str]
