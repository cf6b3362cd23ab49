import json
import socket
import threading
import time

import pytest
import requests

from news_cache.errors import FetchUnavailable
from news_cache.fetcher import fetch_articles, redact_url


class FakeResponse:
    def __init__(self, status_code=200, body=b"", chunks=None):
        self.status_code = status_code
        self._chunks = chunks if chunks is not None else [body]
        self.closed = False

    def iter_content(self, chunk_size=1):
        yield from self._chunks

    def __enter__(self):
        return self

    def close(self):
        self.closed = True

    def __exit__(self, *exc):
        self.close()
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if self.error:
            raise self.error
        return self.response


def _json_body(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


def test_fetch_returns_articles_and_releases_connection():
    response = FakeResponse(
        body=_json_body(
            {
                "status": "ok",
                "articles": [
                    {"title": "One", "source": {"name": "A"}},
                    {"title": "Two", "source": {"name": "B"}, "author": "Kim"},
                ],
            }
        )
    )
    session = FakeSession(response)

    articles = fetch_articles("https://newsapi.org/v2/top-headlines?apiKey=x", 2.5, session=session)

    assert [a.title for a in articles] == ["One", "Two"]
    assert articles[1].author == "Kim"
    assert response.closed
    url, kwargs = session.calls[0]
    assert url.endswith("apiKey=x")
    assert kwargs["timeout"] == (2.5, 2.5)
    assert kwargs["stream"] is True


def test_fetch_keeps_malformed_articles():
    session = FakeSession(
        FakeResponse(body=_json_body({"articles": [{"title": "No source"}, None, 7]}))
    )

    articles = fetch_articles("https://example.com/x", session=session)

    assert len(articles) == 3
    assert articles[0].source is None
    assert articles[1].title is None


def test_fetch_accepts_empty_article_list():
    session = FakeSession(FakeResponse(body=_json_body({"articles": []})))

    assert fetch_articles("https://example.com/x", session=session) == []


@pytest.mark.parametrize("status", [304, 401, 404, 426, 429, 500])
def test_fetch_non_success_status_is_unavailable(status):
    session = FakeSession(FakeResponse(status_code=status, body=_json_body({"articles": []})))

    with pytest.raises(FetchUnavailable):
        fetch_articles("https://example.com/x", session=session)


@pytest.mark.parametrize(
    "error",
    [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        requests.TooManyRedirects("loop"),
    ],
)
def test_fetch_transport_errors_are_unavailable(error):
    with pytest.raises(FetchUnavailable):
        fetch_articles("https://example.com/x", session=FakeSession(error=error))


@pytest.mark.parametrize(
    "body",
    [
        b"<html>not json</html>",
        b"",
        _json_body({"status": "error", "code": "apiKeyInvalid"}),
        _json_body({"articles": None}),
        _json_body({"articles": {"title": "not a list"}}),
        _json_body(["articles"]),
    ],
)
def test_fetch_malformed_body_is_unavailable(body):
    with pytest.raises(FetchUnavailable):
        fetch_articles("https://example.com/x", session=FakeSession(FakeResponse(body=body)))


class StallingResponse(FakeResponse):
    def __init__(self, first_chunk):
        super().__init__(chunks=[first_chunk])
        self.released = threading.Event()

    def iter_content(self, chunk_size=1):
        yield from self._chunks
        self.released.wait(5)
        yield b"[]}"

    def close(self):
        super().close()
        self.released.set()


class StallingSession(FakeSession):
    def __init__(self):
        super().__init__()
        self.released = threading.Event()

    def get(self, url, **kwargs):
        self.released.wait(5)
        raise requests.ConnectionError("released")


def test_fetch_stalled_body_gives_up_at_deadline():
    response = StallingResponse(b'{"articles": ')
    started = time.monotonic()

    with pytest.raises(FetchUnavailable):
        fetch_articles("https://example.com/x", 0.3, session=FakeSession(response))

    assert time.monotonic() - started < 1.5
    assert response.closed


def test_fetch_stalled_headers_gives_up_at_deadline():
    session = StallingSession()
    started = time.monotonic()
    try:
        with pytest.raises(FetchUnavailable):
            fetch_articles("https://example.com/x", 0.3, session=session)
        assert time.monotonic() - started < 1.5
    finally:
        session.released.set()


@pytest.fixture
def trickling_server(monkeypatch):
    """Local HTTP server that sends one byte every 0.2s, in the headers or the body."""
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(10)
    stop = threading.Event()
    stage = {}

    def serve():
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        with conn:
            conn.recv(65536)
            head = b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: 60\r\n\r\n"
            if stage["where"] == "body":
                conn.sendall(head)
                drip = b" " * 60
            else:
                drip = head
            for i in range(len(drip)):
                if stop.wait(0.2):
                    return
                try:
                    conn.sendall(drip[i:i + 1])
                except OSError:
                    return

    def start(where):
        stage["where"] = where
        threading.Thread(target=serve, daemon=True).start()
        host, port = listener.getsockname()
        return f"http://{host}:{port}/v2/top-headlines?apiKey=k"

    yield start
    stop.set()
    listener.close()


@pytest.mark.parametrize("where", ["headers", "body"])
def test_fetch_trickling_server_is_cut_off_at_timeout(trickling_server, where):
    url = trickling_server(where)
    started = time.monotonic()

    with pytest.raises(FetchUnavailable):
        fetch_articles(url, 1.0)

    assert time.monotonic() - started < 2.0


def test_fetch_failure_log_hides_api_key(caplog):
    session = FakeSession(error=requests.ConnectionError("refused"))

    with caplog.at_level("WARNING", logger="news_cache.fetcher"):
        with pytest.raises(FetchUnavailable):
            fetch_articles("https://newsapi.org/v2/everything?q=technology&apiKey=secret", session=session)

    assert "secret" not in caplog.text
    assert "https://newsapi.org/v2/everything" in caplog.text


def test_redact_url_strips_query():
    assert redact_url("https://h/p?apiKey=k&q=x") == "https://h/p"
