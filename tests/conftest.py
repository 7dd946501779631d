from datetime import date, datetime

import pytest
import pytz
from fastapi.testclient import TestClient

from vierwandt.config import Settings
from vierwandt.main import app, get_corpus, get_mailer, get_settings, get_today
from vierwandt.schema import Group, PuzzleRecord

EPOCH = date(2025, 4, 9)


def make_puzzle(pid=1, author="Lena", fixed=None, groups=None):
    groups = groups or [
        ("Obst", ["Apfel", "Birne", "Kirsche", "Pflaume"]),
        ("Planeten", ["Mars", "Venus", "Saturn", "Merkur"]),
        ("Schach", ["Turm", "Springer", "Läufer", "Dame"]),
        ("___ball", ["Fuß", "Hand", "Feder", "Schnee"]),
    ]
    return PuzzleRecord(
        id=pid,
        author=author,
        groups=tuple(Group(category=c, words=tuple(w)) for c, w in groups),
        fixed_positions=fixed or {},
    )


@pytest.fixture
def puzzle():
    return make_puzzle()


@pytest.fixture
def corpus():
    return (
        make_puzzle(1),
        make_puzzle(2, author=None, groups=[
            ("Farben", ["Rot", "Blau", "Gelb", "Grün"]),
            ("Flüsse", ["Rhein", "Elbe", "Donau", "Main"]),
            ("Wetter", ["Regen", "Sturm", "Nebel", "Hagel"]),
            ("Karten", ["Ass", "König", "Bube", "Joker"]),
        ]),
    )


@pytest.fixture
def settings():
    return Settings(
        epoch=EPOCH,
        email_host="smtp.vierwandt.de",
        email_user="bot@vierwandt.de",
        email_pass="secret",
        recipient_email="ops@vierwandt.de",
    )


class FakeMailer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    def send(self, message):
        if self.error is not None:
            raise self.error
        self.sent.append(message)


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def today():
    return datetime(2025, 4, 9, 15, 30, tzinfo=pytz.utc)


@pytest.fixture
def client(corpus, settings, mailer, today):
    app.dependency_overrides[get_corpus] = lambda: corpus
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_today] = lambda: today
    yield TestClient(app)
    app.dependency_overrides.clear()
