import base64
import io
import json
import os
from types import SimpleNamespace

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

import pytest
from PIL import Image

import analyzer
from models import db


def make_image_bytes(size=(800, 600), mode="RGB", fmt="PNG"):
    color = (200, 30, 30, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 1
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_data_url(size=(40, 30)):
    b64 = base64.standard_b64encode(make_image_bytes(size)).decode("utf-8")
    return f"data:image/png;base64,{b64}"


LAWS = {
    "hicks": {"title": "Hick's Law", "severity": "High", "finding": "Nine nav items compete with the CTA.", "why": "More choices slow decisions.", "fix": "Cut the nav to five items."},
    "fitts": {"title": "Fitts's Law", "severity": "Medium", "finding": "Primary button is 28px tall.", "why": "Small targets are slow to hit.", "fix": "Make the button 44px tall."},
    "vonRestorff": {"title": "Von Restorff Effect", "severity": "Low", "finding": "CTA colour matches the header.", "why": "Nothing stands out.", "fix": "Give the CTA a contrasting colour."},
    "jakobs": {"title": "Jakob's Law", "severity": "Low", "finding": "Logo sits on the right.", "why": "Users expect it top-left.", "fix": "Move the logo left."},
    "cognitiveLoad": {"title": "Cognitive Load", "severity": "Medium", "finding": "Three competing headlines.", "why": "Users must work out the message.", "fix": "Keep one headline."},
}

VALID_REPLY = {
    "score": 64,
    "narrative": "The hero is clear but the CTA is buried under navigation noise.",
    "topFixes": ["Cut the nav to five items.", "Enlarge the primary button.", "Keep one headline."],
    "laws": LAWS,
}


class FakeMessages:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        content = [] if self.reply is None else [SimpleNamespace(type="text", text=self.reply)]
        return SimpleNamespace(content=content, stop_reason="end_turn")


@pytest.fixture
def fake_model(monkeypatch):
    """anthropic.Anthropic 를 가짜 클라이언트로 교체."""

    def install(reply=None, error=None):
        if isinstance(reply, dict):
            reply = json.dumps(reply)
        messages = FakeMessages(reply, error)
        monkeypatch.setattr(
            analyzer.anthropic, "Anthropic", lambda api_key: SimpleNamespace(messages=messages)
        )
        return messages

    return install


@pytest.fixture
def app(monkeypatch):
    from server import app as flask_app

    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.delenv("UX_SYSTEM_PROMPT", raising=False)
    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def report_count(app):
    from models import Report

    def count():
        with app.app_context():
            return Report.query.count()

    return count
