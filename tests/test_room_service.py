# 房间聚合：分类、去重、音频匹配、排序、时长
from app.services.room_service import (
    build_room_view,
    compute_duration_minutes,
    is_image_url,
    parse_create_time,
    sort_by_create_time,
    strip_query,
)
from app.schemas.room import MediaItem


def test_reference_example(records) -> None:
    view = build_room_view(records, "r1")

    assert [m.model_dump() for m in view.jpgUrls] == [{"url": "a.jpg", "create_time": "t1"}]
    assert [m.model_dump() for m in view.mp3Urls] == [{"url": "b.mp3", "create_time": "t2"}]
    assert [m.model_dump() for m in view.chatMessages] == [
        {"uid": "u1", "message": "hi", "create_time": "t2", "audioUrl": "b.mp3"}
    ]
    assert view.totalRows == 3
    assert view.userIds == ["u1"]


def test_unknown_room_is_empty(records) -> None:
    view = build_room_view(records, "nope")
    assert view.totalRows == 0
    assert view.jpgUrls == [] and view.mp3Urls == [] and view.chatMessages == []
    assert view.riskLabelNames == [] and view.userIds == []
    assert view.durationMinutes == 0


def test_room_match_is_exact(records) -> None:
    assert build_room_view(records, " r1").totalRows == 0
    assert build_room_view(records, "R1").totalRows == 0


def test_image_rules() -> None:
    assert is_image_url("http://x/a.JPG")
    assert is_image_url("http://x/a.jpeg?token=1")
    assert not is_image_url("http://x/a.png")
    assert strip_query("http://x/a.mp3?a=1?b=2") == "http://x/a.mp3"


def test_image_wins_over_audio() -> None:
    rows = [{"room_id": "r", "url": "http://x/cover.jpg?src=a.mp3", "create_time": "1"}]
    view = build_room_view(rows, "r")
    assert len(view.jpgUrls) == 1
    assert view.mp3Urls == []


def test_audio_dedup_and_last_writer_wins() -> None:
    rows = [
        {"room_id": "r", "url": "http://x/a.mp3?s=1", "create_time": "2024-01-01 10:00:00"},
        {"room_id": "r", "url": "http://x/a.mp3?s=2", "create_time": "2024-01-01 10:01:00"},
        {"room_id": "r", "url": "http://x/b.MP3", "create_time": "2024-01-01 10:01:00"},
        {"room_id": "r", "content": "later", "user_id": "u", "create_time": "2024-01-01 10:01:00"},
    ]
    view = build_room_view(rows, "r")
    assert [m.url for m in view.mp3Urls] == ["http://x/a.mp3", "http://x/b.MP3"]
    assert view.chatMessages[0].audioUrl == "http://x/b.MP3"


def test_chat_filters_and_uid_fallback() -> None:
    rows = [
        {"room_id": "r", "content": "  padded  ", "uid": "legacy", "create_time": "2"},
        {"room_id": "r", "content": "null", "user_id": "u1", "create_time": "3"},
        {"room_id": "r", "content": "   ", "user_id": "u1", "create_time": "4"},
        {"room_id": "r", "content": "no user", "user_id": "", "uid": "  ", "create_time": "5"},
        {"room_id": "r", "content": "missing time", "user_id": "u2"},
        {"room_id": "r", "content": "first", "user_id": "u1", "uid": "ignored", "create_time": "1"},
    ]
    view = build_room_view(rows, "r")
    assert [(m.uid, m.message, m.create_time) for m in view.chatMessages] == [
        ("u1", "first", "1"),
        ("legacy", "padded", "2"),
        ("u2", "missing time", ""),
    ]
    assert all(m.audioUrl is None for m in view.chatMessages)
    assert view.userIds == ["legacy", "u1", "u2"]


def test_risk_labels_deduped_and_sorted() -> None:
    rows = [
        {"room_id": "r", "risk_label_name": "spam"},
        {"room_id": "r", "risk_label_name": " abuse "},
        {"room_id": "r", "risk_label_name": "NuLL"},
        {"room_id": "r", "risk_label_name": ""},
        {"room_id": "r", "risk_label_name": "spam"},
        {"room_id": "r"},
    ]
    assert build_room_view(rows, "r").riskLabelNames == ["abuse", "spam"]


def test_sort_puts_empty_time_last_and_is_stable() -> None:
    items = [
        MediaItem(url="e1", create_time=""),
        MediaItem(url="b", create_time="2024-01-02"),
        MediaItem(url="e2", create_time=""),
        MediaItem(url="a1", create_time="2024-01-01"),
        MediaItem(url="a2", create_time="2024-01-01"),
    ]
    assert [i.url for i in sort_by_create_time(items)] == ["a1", "a2", "b", "e1", "e2"]


def test_duration_minutes() -> None:
    assert compute_duration_minutes(["2024-01-01T00:00:00Z", "2024-01-01T00:10:00Z"]) == 10
    assert compute_duration_minutes(["2024-01-01T00:00:00Z"]) == 0
    assert compute_duration_minutes([]) == 0
    assert compute_duration_minutes(["garbage", "", None, "2024-01-01T00:00:00Z"]) == 0
    # 30 秒向上取整
    assert compute_duration_minutes(["2024-01-01T00:00:00Z", "2024-01-01T00:02:30Z"]) == 3
    assert compute_duration_minutes(["2024-01-01T00:00:00Z", "2024-01-01T00:02:29Z"]) == 2
    # 顺序无关，带时区偏移的会换算
    assert compute_duration_minutes(["2024-01-01T08:20:00+08:00", "2024-01-01T00:00:00Z"]) == 20


def test_parse_create_time_formats() -> None:
    assert parse_create_time("2024/01/01 12:00:00") is not None
    assert parse_create_time("2024-01-01 12:00") is not None
    assert parse_create_time("t1") is None
    assert parse_create_time("   ") is None


def test_rebuild_is_idempotent(records) -> None:
    assert build_room_view(records, "r1") == build_room_view(records, "r1")


def test_input_not_mutated(records) -> None:
    before = [dict(r) for r in records]
    build_room_view(records, "r1")
    assert records == before


def test_parse_create_time_any_fraction_length() -> None:
    assert parse_create_time("2024-01-01T00:00:00.5Z").microsecond == 500000
    assert parse_create_time("2024-01-01T00:00:00.12Z").microsecond == 120000
    assert parse_create_time("2024-01-01 00:00:00.1234567").microsecond == 123456
    assert compute_duration_minutes(["2024-01-01T00:00:00.5Z", "2024-01-01T00:10:00.5Z"]) == 10
