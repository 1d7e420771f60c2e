import pytest
from fastapi.testclient import TestClient

from main import create_app

SAMPLE_CSV = """room_id,url,content,create_time,user_id,uid,risk_label_name
r1,https://cdn.example.com/a.jpg,,2024-01-01T00:00:00Z,,,
r1,https://cdn.example.com/b.mp3?sign=1,,2024-01-01T00:05:00Z,,,porn
r1,,hello there,2024-01-01T00:05:00Z,u1,,NULL
r1,https://cdn.example.com/b.mp3?sign=2,,2024-01-01T00:10:00Z,,,porn
r2,,hi,2024-01-02T08:00:00Z,,u2,abuse
r1,,NULL,2024-01-01T00:07:00Z,u3,,
r3,https://cdn.example.com/c.JPEG,,,u1,,
"""


@pytest.fixture()
def records():
    return [
        {"room_id": "r1", "url": "a.jpg", "create_time": "t1"},
        {"room_id": "r1", "url": "b.mp3?x=1", "create_time": "t2"},
        {"room_id": "r1", "content": "hi", "user_id": "u1", "create_time": "t2"},
    ]


@pytest.fixture()
def sample_csv() -> bytes:
    return SAMPLE_CSV.encode("utf-8")


@pytest.fixture()
def client():
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture()
def loaded_client(client, sample_csv):
    resp = client.post("/api/v1/upload", files={"file": ("rooms.csv", sample_csv, "text/csv")})
    assert resp.status_code == 200
    return client
