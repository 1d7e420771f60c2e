# app/api/ui.py
from html import escape
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse

from app.core.config import settings
from app.core.exceptions import DashboardError
from app.core.utils import avatar_color
from app.schemas.room import ChatMessage, RoomView, SortDirection
from app.services.session_service import DashboardSession, get_session

router = APIRouter()

_CARD_STYLE = "background:#fff; border-radius:10px; padding:14px 18px; box-shadow:0 2px 8px rgba(0,0,0,0.06); margin-bottom:16px;"


def _room_href(room_id: str, user: str | None = None) -> str:
    href = f"/api/ui/rooms/{quote(room_id, safe='')}"
    if user:
        href += f"?user={quote(user, safe='')}"
    return href


def _page(title: str, body: str) -> str:
    return f"""
<!doctype html>
<html>
  <head>
    <meta charset="utf-8"/>
    <title>{escape(title)}</title>
  </head>
  <body style="font-family: Arial, sans-serif; margin: 20px; background:#f7f8fa;">
    <div style="max-width: 1100px; margin: 0 auto;">
      {body}
    </div>
  </body>
</html>
"""


def _render_upload_html(error: str | None = None) -> str:
    error_html = (
        f"<div style='margin-top:12px; padding:10px 14px; background:#fdecea; color:#c5221f; border-radius:6px;'>{escape(error)}</div>"
        if error
        else ""
    )
    body = f"""
      <h2 style="margin: 0 0 12px 0;">{escape(settings.PROJECT_NAME)} - CSV 文件上传与分析</h2>
      <div style="{_CARD_STYLE}">
        <form action="/api/ui/upload" method="post" enctype="multipart/form-data">
          <label style="display:block; color:#444; margin-bottom:8px;">选择CSV文件</label>
          <input type="file" name="file" accept=".csv,text/csv"/>
          <button type="submit" style="margin-left:8px; padding:8px 14px; background:#1a73e8; color:#fff; border:none; border-radius:6px;">上传并分析</button>
        </form>
        {error_html}
      </div>
"""
    return _page("CSV 文件上传", body)


@router.get("/ui/upload", response_class=HTMLResponse)
def upload_page(session: DashboardSession = Depends(get_session)):
    return HTMLResponse(_render_upload_html(session.error))


@router.post("/ui/upload", response_class=HTMLResponse)
async def upload_form(
    file: UploadFile = File(...),
    session: DashboardSession = Depends(get_session),
):
    try:
        await session.ingest_upload(file)
    except DashboardError as e:
        return HTMLResponse(_render_upload_html(e.message), status_code=400)
    return RedirectResponse("/api/ui/rooms", status_code=303)


@router.get("/ui/rooms", response_class=HTMLResponse)
def list_rooms_ui(
    order: SortDirection = Query(SortDirection.ASC),
    session: DashboardSession = Depends(get_session),
):
    if not session.has_data:
        return RedirectResponse("/api/ui/upload", status_code=303)

    stats = session.dataset.stats
    rooms = session.rooms(order)
    room_list = "\n".join(
        [
            (
                "<a href='{href}' style='display:inline-block; margin:4px; padding:8px 10px; background:#eef2ff; "
                "color:#1a73e8; border-radius:6px; text-decoration:none; font-family:monospace;'>"
                "<b>{order}</b> · {room_id}</a>"
            ).format(href=_room_href(r.room_id), order=r.order, room_id=escape(r.room_id))
            for r in rooms
        ]
    )
    toggle = " ".join(
        [
            f"<a href='/api/ui/rooms?order={d.value}' style='padding:6px 10px; border-radius:6px; text-decoration:none; "
            f"{'background:#1a73e8; color:#fff;' if d == order else 'background:#f1f3f4; color:#444;'}'>"
            f"{'正序' if d == SortDirection.ASC else '倒序'}</a>"
            for d in SortDirection
        ]
    )
    body = f"""
      <div style="display:flex; align-items:center; justify-content:space-between; margin-bottom:12px;">
        <h2 style="margin:0;">{escape(session.dataset.source_name or 'CSV')} - 统计</h2>
        <a href="/api/ui/upload" style="text-decoration:none; color:#1a73e8;">重新上传</a>
      </div>
      <div style="{_CARD_STYLE} display:flex; gap:24px;">
        <div>总数: <b>{stats.total}</b></div>
        <div>去重后: <b>{stats.unique}</b></div>
        <div>重复: <b>{stats.duplicates}</b></div>
      </div>
      <div style="{_CARD_STYLE}">
        <div style="display:flex; align-items:center; justify-content:space-between; margin-bottom:10px;">
          <h3 style="margin:0;">房间列表 (按 Order 排序, {len(rooms)} 个)</h3>
          <div>{toggle}</div>
        </div>
        {room_list if room_list else "<div style='color:#999;'>暂无房间</div>"}
      </div>
"""
    return HTMLResponse(_page("房间列表", body))


def _render_chat_html(msg: ChatMessage) -> str:
    color = avatar_color(msg.uid)
    audio = (
        f"<audio controls preload='none' src='{escape(msg.audioUrl)}' style='margin-top:6px; width:100%;'></audio>"
        if msg.audioUrl
        else ""
    )
    return (
        f"<div style='display:flex; gap:10px; margin:12px 0; padding:10px 12px; border-left:4px solid {color}; background:#fff; border-radius:8px;'>"
        f"<div style='width:32px; height:32px; border-radius:50%; background:{color}; color:#fff; display:flex; align-items:center; justify-content:center; font-size:12px; flex-shrink:0;'>{escape(msg.uid[:2])}</div>"
        f"<div style='flex:1;'>"
        f"<div style='color:#666; font-size:12px; margin-bottom:4px;'>{escape(msg.uid)} · {escape(msg.create_time or '-')}</div>"
        f"<div style='white-space:pre-wrap; color:#333;'>{escape(msg.message)}</div>"
        f"{audio}"
        f"</div>"
        f"</div>"
    )


def _render_room_html(view: RoomView, session: DashboardSession) -> str:
    user_options = "".join(
        [
            f"<option value='{escape(uid)}'{' selected' if uid == session.filter_user_id else ''}>{escape(uid)}</option>"
            for uid in view.userIds
        ]
    )
    filtered = ""
    if session.filter_user_id:
        links = " ".join(
            [
                f"<a href='{_room_href(rid, session.filter_user_id)}' style='margin:2px; padding:4px 8px; background:#e8f0fe; color:#1a73e8; border-radius:6px; text-decoration:none; font-family:monospace;'>{escape(rid)}</a>"
                for rid in session.filtered_room_ids
            ]
        )
        links = links or "<span style='color:#999;'>无</span>"
        filtered = (
            f"<div style='margin-top:10px; color:#444;'>包含用户 <b>{escape(session.filter_user_id)}</b> "
            f"的 Room ID ({len(session.filtered_room_ids)} 个):</div>"
            f"<div style='margin-top:6px;'>{links}</div>"
        )
    clear_link = (
        f"<a href='{_room_href(view.room_id)}' style='margin-left:8px; color:#1a73e8;'>清除筛选</a>"
        if session.filter_user_id
        else ""
    )
    user_filter = (
        f"""
      <div style="{_CARD_STYLE}">
        <form method="get" action="{_room_href(view.room_id)}">
          <label style="color:#444;">按用户筛选房间:</label>
          <select name="user" style="padding:6px 8px; margin-left:6px;">
            <option value="">-- 选择用户 --</option>
            {user_options}
          </select>
          <button type="submit" style="margin-left:6px; padding:6px 10px;">筛选</button>
          {clear_link}
        </form>
        {filtered}
      </div>
"""
        if view.userIds
        else ""
    )
    labels = "".join(
        [
            f"<span style='display:inline-block; margin:3px; padding:6px 10px; border-radius:6px; background:#fdecea; color:#c5221f;'>{escape(label)}</span>"
            for label in view.riskLabelNames
        ]
    )
    label_section = (
        f"<div style='{_CARD_STYLE}'><h3 style='margin:0 0 8px 0;'>Risk Label</h3>{labels}</div>"
        if labels
        else ""
    )
    chats = "".join([_render_chat_html(m) for m in view.chatMessages])
    images = "".join(
        [
            f"<a href='{escape(item.url)}' target='_blank' style='display:inline-block; margin:4px; text-align:center; font-size:12px; color:#666; text-decoration:none;'>"
            f"<img src='{escape(item.url)}' loading='lazy' style='width:160px; height:120px; object-fit:cover; border-radius:8px; border:1px solid #e6e6e6;'/>"
            f"<div>{escape(item.create_time or '-')}</div></a>"
            for item in view.jpgUrls
        ]
    )
    audios = "".join(
        [
            f"<div style='margin:8px 0; padding:8px 10px; border-left:4px solid #22c55e; background:#fafafa; border-radius:6px;'>"
            f"<div style='color:#666; font-size:12px;'>{escape(item.create_time or '-')}</div>"
            f"<audio controls preload='none' src='{escape(item.url)}' style='width:100%;'></audio></div>"
            for item in view.mp3Urls
        ]
    )
    body = f"""
      <div style="display:flex; align-items:center; justify-content:space-between; margin-bottom:12px;">
        <h2 style="margin:0;">Room ID: {escape(view.room_id)}</h2>
        <a href="/api/ui/rooms" style="text-decoration:none; color:#1a73e8;">返回房间列表</a>
      </div>
      <div style="{_CARD_STYLE} color:#444;">
        时长: {view.durationMinutes} 分钟 | 总行数: {view.totalRows} |
        图片: {len(view.jpgUrls)} | 音频: {len(view.mp3Urls)} |
        聊天: {len(view.chatMessages)} | Risk Label: {len(view.riskLabelNames)} 种
      </div>
      {user_filter}
      {label_section}
      <div style="{_CARD_STYLE}">
        <h3 style="margin:0 0 8px 0;">聊天记录 ({len(view.chatMessages)} 条)</h3>
        {chats if chats else "<div style='color:#999;'>暂无聊天记录</div>"}
      </div>
      <div style="{_CARD_STYLE}">
        <h3 style="margin:0 0 8px 0;">图片 ({len(view.jpgUrls)})</h3>
        {images if images else "<div style='color:#999;'>暂无图片</div>"}
      </div>
      <div style="{_CARD_STYLE}">
        <h3 style="margin:0 0 8px 0;">音频 ({len(view.mp3Urls)})</h3>
        {audios if audios else "<div style='color:#999;'>暂无音频</div>"}
      </div>
"""
    return _page(f"房间 {view.room_id}", body)


@router.get("/ui/rooms/{room_id:path}", response_class=HTMLResponse)
def room_detail_ui(
    room_id: str,
    user: str | None = Query(None, description="按用户筛选包含该用户的房间"),
    session: DashboardSession = Depends(get_session),
):
    if not session.has_data:
        return RedirectResponse("/api/ui/upload", status_code=303)
    view = session.select_room(room_id)
    session.filter_by_user(user)
    return HTMLResponse(_render_room_html(view, session))
