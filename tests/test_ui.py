def test_root_redirects_to_upload(client) -> None:
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code in (302, 307)
    assert resp.headers["location"] == "/api/ui/upload"


def test_upload_page(client) -> None:
    resp = client.get("/api/ui/upload")
    assert resp.status_code == 200
    assert "multipart/form-data" in resp.text


def test_room_pages_redirect_without_data(client) -> None:
    resp = client.get("/api/ui/rooms", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/api/ui/upload"


def test_upload_form_then_room_list(client, sample_csv) -> None:
    resp = client.post(
        "/api/ui/upload",
        files={"file": ("rooms.csv", sample_csv, "text/csv")},
        follow_redirects=False,
    )
    assert resp.status_code == 303
    page = client.get("/api/ui/rooms").text
    assert "房间列表 (按 Order 排序, 3 个)" in page
    assert "/api/ui/rooms/r2" in page


def test_upload_form_shows_single_error(client) -> None:
    resp = client.post("/api/ui/upload", files={"file": ("a.txt", b"x", "text/plain")})
    assert resp.status_code == 400
    assert "请上传CSV文件" in resp.text
    # 错误信息保留在会话里，刷新上传页仍能看到
    assert "请上传CSV文件" in client.get("/api/ui/upload").text


def test_room_detail_page(loaded_client) -> None:
    page = loaded_client.get("/api/ui/rooms/r1").text
    assert "时长: 10 分钟" in page
    assert "hello there" in page
    assert "https://cdn.example.com/b.mp3" in page
    assert "porn" in page


def test_room_detail_user_filter(loaded_client) -> None:
    page = loaded_client.get("/api/ui/rooms/r1", params={"user": "u1"}).text
    assert "包含用户 <b>u1</b> 的 Room ID (2 个)" in page
    assert "/api/ui/rooms/r3?user=u1" in page


def test_room_detail_escapes_content(client) -> None:
    csv_bytes = b'room_id,content,user_id\nr1,<script>alert(1)</script>,u1\n'
    client.post("/api/v1/upload", files={"file": ("x.csv", csv_bytes, "text/csv")})
    page = client.get("/api/ui/rooms/r1").text
    assert "<script>alert(1)</script>" not in page
    assert "&lt;script&gt;" in page


def test_room_link_with_slash_opens_detail(client) -> None:
    csv_bytes = b"room_id,content,user_id\nroom/7,slash-room-message,u1\n"
    client.post("/api/v1/upload", files={"file": ("x.csv", csv_bytes, "text/csv")})
    page = client.get("/api/ui/rooms").text
    assert "/api/ui/rooms/room%2F7" in page

    resp = client.get("/api/ui/rooms/room%2F7")
    assert resp.status_code == 200
    assert "Room ID: room/7" in resp.text
    assert "slash-room-message" in resp.text
