# app/api/endpoints.py
from fastapi import APIRouter, Depends, File, Query, UploadFile

from app.schemas.room import RoomView, SortDirection, UploadResponse, UserRoomsResponse
from app.services.session_service import DashboardSession, get_session

router = APIRouter()


def _empty_response() -> dict:
    return {"status": "empty", "message": "请先上传CSV文件"}


@router.get("/health")
def health():
    return {"status": "ok"}


@router.post("/v1/upload", response_model=UploadResponse)
async def upload_csv(
    file: UploadFile = File(...),
    session: DashboardSession = Depends(get_session),
):
    """
    上传 CSV：校验类型 -> 读取 -> 解析 -> 统计 room_id

    失败时由全局异常处理返回 400 {"status": "error", "message": ...}
    """
    dataset = await session.ingest_upload(file)
    return UploadResponse(
        source_name=dataset.source_name,
        stats=dataset.stats,
        rooms=session.rooms(),
    )


@router.get("/v1/stats")
def get_stats(session: DashboardSession = Depends(get_session)):
    if not session.has_data:
        return _empty_response()
    return {
        "status": "success",
        "source_name": session.dataset.source_name,
        "stats": session.dataset.stats.model_dump(),
    }


@router.get("/v1/rooms")
def list_rooms(
    order: SortDirection = Query(SortDirection.ASC, description="按 order 升序(asc)或降序(desc)"),
    session: DashboardSession = Depends(get_session),
):
    if not session.has_data:
        return _empty_response()
    rooms = session.rooms(order)
    return {
        "status": "success",
        "order": order.value,
        "total": len(rooms),
        "rooms": [r.model_dump() for r in rooms],
    }


@router.get("/v1/rooms/{room_id:path}", response_model=RoomView)
def get_room(room_id: str, session: DashboardSession = Depends(get_session)):
    """房间详情：图片、音频、聊天记录、风险标签、用户、时长"""
    return session.select_room(room_id)


@router.get("/v1/users/rooms", response_model=UserRoomsResponse)
def get_user_rooms(
    user_id: str = Query("", description="用户 ID（user_id 或 uid），放在查询参数里以支持任意字符"),
    session: DashboardSession = Depends(get_session),
):
    return UserRoomsResponse(user_id=user_id, room_ids=session.filter_by_user(user_id))
