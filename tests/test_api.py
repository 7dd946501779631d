import smtplib
from datetime import datetime

import pytz
from fastapi.testclient import TestClient

from conftest import FakeMailer, make_puzzle
from vierwandt import main
from vierwandt.main import app, get_corpus, get_mailer, get_settings, get_today


def test_words(client, corpus):
    r = client.get("/words")
    assert r.status_code == 200
    body = r.json()
    assert sorted(body["words"]) == sorted(corpus[0].all_words())
    assert body["author"] == "Lena"


def test_words_next_day_uses_next_puzzle(client, corpus):
    app.dependency_overrides[get_today] = lambda: datetime(2025, 4, 10, 8, 0, tzinfo=pytz.utc)
    body = client.get("/words").json()
    assert sorted(body["words"]) == sorted(corpus[1].all_words())
    assert body["author"] == "Unknown"


def test_words_without_puzzles(client):
    app.dependency_overrides[get_corpus] = lambda: ()
    r = client.get("/words")
    assert r.status_code == 500
    assert set(r.json()) == {"error"}


def test_words_before_epoch(client):
    app.dependency_overrides[get_today] = lambda: datetime(2025, 1, 1, tzinfo=pytz.utc)
    assert client.get("/words").status_code == 500


def test_groups(client):
    r = client.get("/groups")
    assert r.status_code == 200
    groups = r.json()["groups"]
    assert len(groups) == 4
    assert groups[0] == {"category": "Obst", "words": ["Apfel", "Birne", "Kirsche", "Pflaume"]}


def test_groups_without_puzzles(client, settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"epoch": None})
    r = client.get("/groups")
    assert r.status_code == 500
    assert "error" in r.json()


def test_check_correct(client):
    r = client.post("/check", json={"selectedWords": ["Venus", "Mars", "Merkur", "Saturn"]})
    assert r.status_code == 200
    assert r.json() == {"correct": True, "category": "Planeten"}


def test_check_wrong_has_no_category(client):
    r = client.post("/check", json={"selectedWords": ["Venus", "Mars", "Merkur", "Apfel"]})
    assert r.status_code == 200
    assert r.json() == {"correct": False}


def test_check_three_words(client):
    r = client.post("/check", json={"selectedWords": ["Venus", "Mars", "Merkur"]})
    assert r.status_code == 400
    assert "error" in r.json()


def test_check_not_an_array(client):
    for payload in ({"selectedWords": "Venus"}, {}, {"selectedWords": [1, 2, 3, 4]}):
        assert client.post("/check", json=payload).status_code == 400


def test_check_malformed_body(client):
    r = client.post("/check", content=b"nope", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_check_bad_input_wins_over_missing_puzzle(client):
    app.dependency_overrides[get_corpus] = lambda: ()
    assert client.post("/check", json={"selectedWords": ["a"]}).status_code == 400
    assert client.post("/check", json={"selectedWords": ["a", "b", "c", "d"]}).status_code == 500


def test_submit(client, mailer):
    r = client.post("/submit-puzzle", json={"author": "Lena", "category": "Vögel", "words": "Amsel\nFink"})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert len(mailer.sent) == 1


def test_submit_missing_author(client, mailer):
    r = client.post("/submit-puzzle", json={"author": "", "category": "Vögel"})
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert mailer.sent == []


def test_submit_delivery_failure(client):
    app.dependency_overrides[get_mailer] = lambda: FakeMailer(error=smtplib.SMTPException("down"))
    r = client.post("/submit-puzzle", json={"author": "Lena", "category": "Vögel"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert "down" not in body["message"]


def test_submit_without_mail_config(client, settings):
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"email_host": None})
    r = client.post("/submit-puzzle", json={"author": "Lena", "category": "Vögel"})
    assert r.status_code == 500
    assert r.json()["success"] is False


def test_cors_allows_configured_origin(client):
    origin = main.settings.frontend_url
    r = client.get("/healthz", headers={"Origin": origin})
    assert r.headers.get("access-control-allow-origin") == origin
    r = client.get("/healthz", headers={"Origin": "https://elsewhere.example"})
    assert "access-control-allow-origin" not in r.headers


def test_startup_loads_bundled_corpus():
    app.dependency_overrides.clear()
    with TestClient(app) as c:
        body = c.get("/healthz").json()
    assert body["ok"] is True
    assert body["puzzles"] >= 1


def test_words_incomplete_grid(client):
    short = make_puzzle(groups=[
        ("A", ["a1", "a2", "a3", "a4"]),
        ("B", ["b1", "b2", "b3", "b4"]),
        ("C", ["c1", "c2", "c3", "c4"]),
        ("D", ["d1", "d2", "d3"]),
    ])
    app.dependency_overrides[get_corpus] = lambda: (short,)
    r = client.get("/words")
    assert r.status_code == 500
    assert set(r.json()) == {"error"}


def test_submit_category_with_line_break(client, mailer):
    r = client.post("/submit-puzzle", json={"author": "Lena", "category": "Vögel\nBcc: x@y.z"})
    assert r.status_code == 200
    assert r.json()["success"] is True
    msg = mailer.sent[0]
    assert msg["Bcc"] is None
    assert "\n" not in msg["Subject"]
    assert msg["Subject"] == "New puzzle proposal: Vögel Bcc: x@y.z"


def test_submit_wrong_types_use_submission_shape(client, mailer):
    for payload in ({"author": 5, "category": "X"}, {"author": "Lena", "category": ["X"]}):
        r = client.post("/submit-puzzle", json=payload)
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Author and category are required."}
    assert mailer.sent == []


def test_submit_without_body_uses_submission_shape(client):
    for r in (client.post("/submit-puzzle"), client.post("/submit-puzzle", json=[1, 2])):
        assert r.status_code == 400
        assert r.json()["success"] is False


def test_submit_numeric_words(client, mailer):
    r = client.post("/submit-puzzle", json={"author": "Lena", "category": "Zahlen", "words": 5})
    assert r.status_code == 200
    assert "5" in mailer.sent[0].get_body(("plain",)).get_content()
