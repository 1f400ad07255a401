from fastapi.testclient import TestClient
from sqlmodel import Session, select

from app.core.config import settings
from app.models import Comment, CommentTarget

API = f"{settings.API_V1_STR}/comments"


def submit(client: TestClient, **fields) -> dict:
    payload = {
        "target_type": "blog",
        "target_id": 1,
        "name": "Ayşe",
        "email": "ayse@example.com",
        "body": "Çok faydalı bir yazı, teşekkürler.",
        **fields,
    }
    r = client.post(f"{API}/", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def test_submitted_comment_is_pending_and_hides_email(client: TestClient) -> None:
    comment = submit(client, rating=5)
    assert comment["status"] == 0
    assert comment["rating"] == 5
    assert "email" not in comment

    r = client.get(f"{API}/blog/1")
    assert r.json() == []


def test_comment_requires_valid_email(client: TestClient) -> None:
    r = client.post(
        f"{API}/",
        json={"target_type": "blog", "target_id": 1, "name": "A", "email": "nope", "body": "x"},
    )
    assert r.status_code == 422


def test_threads_after_approval(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    first = submit(client, body="İlk yorum")
    second = submit(client, body="İkinci yorum")
    r = client.post(f"{API}/{first['id']}/reply", json={
        "name": "Danışman", "email": "info@example.com", "body": "Teşekkür ederiz!",
    })
    assert r.status_code == 201
    reply = r.json()
    assert reply["parent_id"] == first["id"]
    assert reply["status"] == 0

    pending = client.get(f"{API}/pending", headers=superuser_token_headers).json()
    assert {c["id"] for c in pending} == {first["id"], second["id"], reply["id"]}

    for comment_id in (first["id"], second["id"], reply["id"]):
        r = client.post(f"{API}/{comment_id}/approve", headers=superuser_token_headers)
        assert r.json()["status"] == 1

    threads = client.get(f"{API}/blog/1").json()
    assert [t["id"] for t in threads] == [second["id"], first["id"]]
    assert [r["id"] for r in threads[1]["replies"]] == [reply["id"]]
    assert client.get(f"{API}/country/1").json() == []


def test_reply_to_a_reply_joins_the_root_thread(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    top = submit(client, body="Vize ne kadar sürüyor?")
    author = {"name": "Mehmet", "email": "mehmet@example.com"}
    first = client.post(f"{API}/{top['id']}/reply", json={**author, "body": "İki hafta."}).json()
    second = client.post(f"{API}/{first['id']}/reply", json={**author, "body": "Teşekkürler!"})
    assert second.status_code == 201
    assert second.json()["parent_id"] == top["id"]

    for comment_id in (top["id"], first["id"], second.json()["id"]):
        client.post(f"{API}/{comment_id}/approve", headers=superuser_token_headers)

    threads = client.get(f"{API}/blog/1").json()
    assert [t["id"] for t in threads] == [top["id"]]
    assert [r["body"] for r in threads[0]["replies"]] == ["İki hafta.", "Teşekkürler!"]


def test_reply_to_unknown_comment(client: TestClient) -> None:
    r = client.post(f"{API}/999/reply", json={
        "name": "A", "email": "a@example.com", "body": "Merhaba",
    })
    assert r.status_code == 404


def test_like_toggles_per_ip(client: TestClient) -> None:
    comment = submit(client)
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

    r = client.post(f"{API}/{comment['id']}/like", headers=headers)
    assert r.json() == {"liked": True, "likes_count": 1}

    r = client.post(f"{API}/{comment['id']}/like", headers={"X-Forwarded-For": "198.51.100.2"})
    assert r.json() == {"liked": True, "likes_count": 2}

    r = client.post(f"{API}/{comment['id']}/like", headers=headers)
    assert r.json() == {"liked": False, "likes_count": 1}


def test_admin_delete_removes_replies(
    client: TestClient, superuser_token_headers: dict[str, str], db: Session
) -> None:
    parent = Comment(
        target_type=CommentTarget.COUNTRY, target_id=3, name="A", email="a@example.com", body="x"
    )
    db.add(parent)
    db.commit()
    db.refresh(parent)
    parent_id = parent.id
    db.add(
        Comment(
            target_type=CommentTarget.COUNTRY,
            target_id=3,
            parent_id=parent_id,
            name="B",
            email="b@example.com",
            body="y",
        )
    )
    db.commit()

    r = client.delete(f"{API}/{parent_id}", headers=superuser_token_headers)
    assert r.status_code == 200
    db.expire_all()
    assert db.get(Comment, parent_id) is None
    assert db.exec(select(Comment).where(Comment.parent_id == parent_id)).all() == []
    assert client.get(f"{API}/pending", headers=superuser_token_headers).json() == []
