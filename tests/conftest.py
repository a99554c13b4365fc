import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


@pytest.fixture(autouse=True)
def _no_real_api_key(monkeypatch):
    # Avoid accidental usage of real API keys during tests
    monkeypatch.setenv("GROQ_API_KEY", "")


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Provide a FastAPI TestClient with an isolated SQLite DB."""
    monkeypatch.setenv("CORS_ORIGINS", "*")

    # Import DB after env is set
    from jobtracker import db
    # Ensure models are registered on Base before create_all
    import jobtracker.models  # noqa: F401

    # Create isolated SQLite DB file under tmp_path
    test_db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite:///{test_db_path}", connect_args={"check_same_thread": False}
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Ensure the app uses this engine when main.py imports it
    monkeypatch.setattr(db, "engine", engine)
    db.Base.metadata.create_all(bind=engine)

    # Dependency override to use the test DB session
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    from jobtracker.main import app

    app.dependency_overrides[db.get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def chat_reply(content: str) -> dict:
    """Body of an OpenAI-compatible chat completion carrying `content`."""
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", json_data=None):
        self.status_code = status_code
        self.text = text if json_data is None else json.dumps(json_data)
        self._json = json_data

    def json(self):
        if self._json is None:
            return json.loads(self.text)
        return self._json


class FakeHTTP:
    """Stands in for httpx.AsyncClient: serves pages for GET, LLM replies for POST.

    `pages` maps URL -> FakeResponse or an exception to raise.
    `llm_replies` is consumed in order; each entry is a FakeResponse, an
    exception, or a plain string used as the completion content.
    """

    def __init__(self):
        self.pages = {}
        self.llm_replies = []
        self.gets = []
        self.posts = []

    def client_class(self):
        fake = self

        class FakeAsyncClient:
            def __init__(self, *args, **kwargs):
                self.kwargs = kwargs

            async def __aenter__(self):
                return self

            async def __aexit__(self, exc_type, exc, tb):
                return False

            async def get(self, url):
                fake.gets.append({"url": url, "client_kwargs": self.kwargs})
                page = fake.pages.get(url, FakeResponse(404, "not found"))
                if isinstance(page, Exception):
                    raise page
                return page

            async def post(self, url, headers=None, json=None):
                fake.posts.append({"url": url, "headers": headers, "json": json})
                reply = fake.llm_replies.pop(0)
                if isinstance(reply, Exception):
                    raise reply
                if isinstance(reply, str):
                    return FakeResponse(200, json_data=chat_reply(reply))
                return reply

        return FakeAsyncClient


@pytest.fixture
def fake_http(monkeypatch):
    """Patch httpx.AsyncClient (used by ingest and ai_services) with FakeHTTP."""
    fake = FakeHTTP()
    monkeypatch.setattr(httpx, "AsyncClient", fake.client_class())
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    return fake


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GROQ_API_KEY", "test-key")
    return "test-key"


def make_pdf(text: str = "") -> bytes:
    """Build a one-page PDF; the page shows `text` in Helvetica, or nothing if empty."""
    content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1") if text else b""
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] /Contents 4 0 R"
        b" /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = b"%PDF-1.4\n"
    offsets = []
    for num, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % num + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    out += b"".join(b"%010d 00000 n \n" % off for off in offsets)
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_at)
    return out
