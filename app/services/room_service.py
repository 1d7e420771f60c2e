"""
房间聚合服务

从全量记录里筛出一个 room_id 的所有行，整理成 RoomView：
图片/音频列表、带音频匹配的聊天记录、风险标签、参与用户、时长。
纯函数，不缓存，每次选中房间都重新计算。
"""
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Set, TypeVar, Union

from app.core.utils import has_text, is_blank, resolve_user_id
from app.schemas.room import ChatMessage, MediaItem, Record, RoomView

IMAGE_MARKERS = (".jpg", ".jpeg")
AUDIO_MARKER = ".mp3"

# fromisoformat 之外再兜底几种常见导出格式
_FALLBACK_TIME_FORMATS = (
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)

# 秒后面的小数部分；Python 3.10 的 fromisoformat 只认 3 位或 6 位
_FRACTION_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")

T = TypeVar("T", bound=Union[MediaItem, ChatMessage])


def is_image_url(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in IMAGE_MARKERS)


def is_audio_url(url: str) -> bool:
    return AUDIO_MARKER in url.lower()


def strip_query(url: str) -> str:
    """去掉 ? 之后的查询参数，作为音频去重的 key"""
    return url.split("?", 1)[0]


def parse_create_time(value: Optional[str]) -> Optional[datetime]:
    """解析 create_time，无法解析返回 None；不带时区的按 UTC 处理"""
    if is_blank(value):
        return None
    text = _FRACTION_PATTERN.sub(
        lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", value.strip()
    )
    parsed = None
    try:
        # 兼容旧版本 Python 不认识末尾的 Z
        parsed = datetime.fromisoformat(text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text)
    except ValueError:
        for fmt in _FALLBACK_TIME_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def compute_duration_minutes(create_times: Sequence[Optional[str]]) -> int:
    """最早到最晚的分钟数，四舍五入；有效时间少于 2 个时为 0"""
    valid = sorted(t for t in (parse_create_time(v) for v in create_times) if t is not None)
    if len(valid) < 2:
        return 0
    elapsed_ms = (valid[-1] - valid[0]) / timedelta(milliseconds=1)
    return int(math.floor(elapsed_ms / 60000 + 0.5))


def sort_by_create_time(items: List[T]) -> List[T]:
    """按 create_time 字符串升序；空时间排在最后；稳定排序"""
    return sorted(items, key=lambda item: (item.create_time == "", item.create_time))


def collect_risk_labels(rows: Sequence[Record]) -> List[str]:
    labels = {
        row["risk_label_name"].strip()
        for row in rows
        if has_text(row.get("risk_label_name"))
    }
    return sorted(labels)


def collect_user_ids(rows: Sequence[Record]) -> List[str]:
    user_ids: Set[str] = set()
    for row in rows:
        user_id = resolve_user_id(row)
        if not is_blank(user_id):
            user_ids.add(user_id.strip())
    return sorted(user_ids)


def build_room_view(records: Sequence[Record], room_id: str) -> RoomView:
    room_rows = [row for row in records if row.get("room_id") == room_id]
    if not room_rows:
        return RoomView(room_id=room_id)

    jpg_urls: List[MediaItem] = []
    mp3_urls: List[MediaItem] = []
    seen_audio: Set[str] = set()
    # create_time -> 音频地址；同一时间多条音频时后写覆盖先写
    audio_by_time: Dict[str, str] = {}

    # 第一遍：区分图片和音频，建立时间到音频的映射
    for row in room_rows:
        url = row.get("url")
        if not url:
            continue
        create_time = row.get("create_time") or ""
        if is_image_url(url):
            jpg_urls.append(MediaItem(url=url, create_time=create_time))
        elif is_audio_url(url):
            base_url = strip_query(url)
            if base_url not in seen_audio:
                seen_audio.add(base_url)
                mp3_urls.append(MediaItem(url=base_url, create_time=create_time))
            if create_time:
                audio_by_time[create_time] = base_url

    # 第二遍：聊天记录，按时间挂上音频
    chat_messages: List[ChatMessage] = []
    for row in room_rows:
        user_id = resolve_user_id(row)
        content = (row.get("content") or "").strip()
        if not has_text(content) or is_blank(user_id):
            continue
        create_time = row.get("create_time") or ""
        chat_messages.append(
            ChatMessage(
                uid=user_id,
                message=content,
                create_time=create_time,
                audioUrl=audio_by_time.get(create_time),
            )
        )

    return RoomView(
        room_id=room_id,
        jpgUrls=sort_by_create_time(jpg_urls),
        mp3Urls=sort_by_create_time(mp3_urls),
        chatMessages=sort_by_create_time(chat_messages),
        riskLabelNames=collect_risk_labels(room_rows),
        userIds=collect_user_ids(room_rows),
        durationMinutes=compute_duration_minutes([row.get("create_time") for row in room_rows]),
        totalRows=len(room_rows),
    )

