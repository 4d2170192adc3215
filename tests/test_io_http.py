"""Tests for HTTP bodies."""

import socket
import threading

import httpx
import pytest
import requests
from pytest_httpserver import HTTPServer
from werkzeug import Request, Response

from bodybytes import collect, collect_with_limit, collect_sync, collect_with_limit_sync, SizeHint
from bodybytes.io.base import SourceError, content_length, remaining_hint
from bodybytes.io.http_sync import HTTPBody, open_http_body
from bodybytes.io.http_async import HTTPAsyncBody, open_http_body_async, close_global_client

TEST_DATA = b"0123456789" * 100  # 1000 bytes
REFUSED_URL = "http://127.0.0.1:1/body"


def _handle_streamed(request: Request) -> Response:
    """Respond without Content-Length, in several pieces."""
    def generate():
        for i in range(0, len(TEST_DATA), 250):
            yield TEST_DATA[i:i + 250]
    return Response(generate(), status=200)


def _start_server() -> HTTPServer:
    server = HTTPServer(host="127.0.0.1", port=0)
    server.expect_request("/body").respond_with_data(TEST_DATA)
    server.expect_request("/empty").respond_with_data(b"")
    server.expect_request("/streamed").respond_with_handler(_handle_streamed)
    server.expect_request("/missing").respond_with_data("not found", status=404)
    server.expect_request("/moved").respond_with_data("redirect page", status=302, headers={"Location": "/target"})
    server.expect_request("/target").respond_with_data(b"REAL BODY")
    server.start()
    return server


class TestHTTPBody:
    """Test synchronous HTTP body."""

    def setup_method(self):
        """Set up test HTTP server."""
        self.server = _start_server()
        self.base_url = f"http://127.0.0.1:{self.server.port}"

    def teardown_method(self):
        """Clean up test HTTP server."""
        self.server.stop()

    def test_collect(self):
        """Test collecting a whole response body."""
        with HTTPBody(f"{self.base_url}/body", chunk_size=100) as body:
            assert collect_sync(body) == TEST_DATA
            assert body.content_length == 1000
            assert body.chunks_read == 10
            assert body.bytes_read == 1000

    def test_collect_with_limit(self):
        """Test bounded collection stops after the chunk reaching the limit."""
        with HTTPBody(f"{self.base_url}/body", chunk_size=100) as body:
            assert collect_with_limit_sync(body, 250) == TEST_DATA[:300]
            assert body.chunks_read == 3

    def test_streamed_without_content_length(self):
        """Test a response without Content-Length."""
        with HTTPBody(f"{self.base_url}/streamed") as body:
            assert collect_sync(body) == TEST_DATA

    def test_empty_body(self):
        with HTTPBody(f"{self.base_url}/empty") as body:
            assert collect_sync(body) == b""

    def test_size_hint(self):
        """Test the hint is empty before the request and exact once streaming."""
        with HTTPBody(f"{self.base_url}/body", chunk_size=100) as body:
            assert body.size_hint() == SizeHint()
            next(body)
            hint = body.size_hint()
            assert hint.exact_size is not None
            assert hint.exact_size <= 900

    def test_error_status(self):
        """Test HTTP errors surface as SourceError."""
        with HTTPBody(f"{self.base_url}/missing") as body:
            with pytest.raises(SourceError, match="status 404"):
                collect_sync(body)

    def test_connection_error(self):
        """Test connection failures surface as SourceError chained to requests."""
        body = HTTPBody(REFUSED_URL)
        with pytest.raises(SourceError) as exc_info:
            collect_sync(body)
        assert isinstance(exc_info.value.__cause__, requests.RequestException)

    def test_follows_redirect(self):
        """Test a redirect yields the target's body."""
        with HTTPBody(f"{self.base_url}/moved") as body:
            assert collect_sync(body) == b"REAL BODY"

    def test_custom_session(self):
        """Test a caller-provided session is used."""
        with requests.Session() as session:
            with HTTPBody(f"{self.base_url}/body", session=session) as body:
                assert collect_sync(body) == TEST_DATA

    def test_factory_function(self):
        """Test factory function."""
        body = open_http_body(f"{self.base_url}/body")
        assert isinstance(body, HTTPBody)
        assert collect_sync(body) == TEST_DATA
        body.close()


class TestHTTPAsyncBody:
    """Test asynchronous HTTP body."""

    def setup_method(self):
        """Set up test HTTP server."""
        self.server = _start_server()
        self.base_url = f"http://127.0.0.1:{self.server.port}"

    def teardown_method(self):
        """Clean up test HTTP server."""
        self.server.stop()

    @pytest.mark.asyncio
    async def test_collect(self):
        """Test async collection of a whole response body."""
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(f"{self.base_url}/body", chunk_size=100, client=client) as body:
                assert await collect(body) == TEST_DATA
                assert body.content_length == 1000
                assert body.chunks_read == 10

    @pytest.mark.asyncio
    async def test_collect_with_limit(self):
        """Test async bounded collection."""
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(f"{self.base_url}/body", chunk_size=100, client=client) as body:
                assert await collect_with_limit(body, 250) == TEST_DATA[:300]
                assert body.chunks_read == 3

    @pytest.mark.asyncio
    async def test_streamed_without_content_length(self):
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(f"{self.base_url}/streamed", client=client) as body:
                assert await collect(body) == TEST_DATA
                assert body.size_hint() == SizeHint()

    @pytest.mark.asyncio
    async def test_size_hint(self):
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(f"{self.base_url}/body", chunk_size=100, client=client) as body:
                assert body.size_hint() == SizeHint()
                await body.__anext__()
                hint = body.size_hint()
                assert hint.exact_size is not None
                assert hint.exact_size <= 900

    @pytest.mark.asyncio
    async def test_error_status(self):
        """Test HTTP errors surface as SourceError."""
        async with httpx.AsyncClient() as client:
            body = HTTPAsyncBody(f"{self.base_url}/missing", client=client)
            with pytest.raises(SourceError, match="status 404"):
                await collect(body)

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test connection failures surface as SourceError chained to httpx."""
        async with httpx.AsyncClient() as client:
            body = HTTPAsyncBody(REFUSED_URL, client=client)
            with pytest.raises(SourceError) as exc_info:
                await collect(body)
            assert isinstance(exc_info.value.__cause__, httpx.RequestError)

    @pytest.mark.asyncio
    async def test_follows_redirect(self):
        """Test a redirect yields the target's body, same as the sync body."""
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(f"{self.base_url}/moved", client=client) as body:
                assert await collect(body) == b"REAL BODY"

    @pytest.mark.asyncio
    async def test_global_client_follows_redirect(self):
        try:
            async with HTTPAsyncBody(f"{self.base_url}/moved") as body:
                assert await collect(body) == b"REAL BODY"
        finally:
            await close_global_client()

    @pytest.mark.asyncio
    async def test_global_client(self):
        """Test the shared client is used when none is given."""
        try:
            body = await open_http_body_async(f"{self.base_url}/body")
            async with body:
                assert await collect(body) == TEST_DATA
        finally:
            await close_global_client()


class TruncatingServer:
    """Raw socket server that announces 100 bytes but sends only 10."""

    def __init__(self):
        self._sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._sock.bind(("127.0.0.1", 0))
        self._sock.listen(5)
        self._sock.settimeout(0.1)
        self.port = self._sock.getsockname()[1]
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)

    def start(self):
        self._thread.start()

    def stop(self):
        self._stopped.set()
        self._thread.join()
        self._sock.close()

    def _serve(self):
        while not self._stopped.is_set():
            try:
                conn, _ = self._sock.accept()
            except socket.timeout:
                continue
            with conn:
                conn.settimeout(5)
                request = b""
                while b"\r\n\r\n" not in request:
                    part = conn.recv(4096)
                    if not part:
                        break
                    request += part
                conn.sendall(
                    b"HTTP/1.1 200 OK\r\n"
                    b"Content-Length: 100\r\n"
                    b"Connection: close\r\n"
                    b"\r\n" + TEST_DATA[:10]
                )


class TestTruncatedBody:
    """Test read failures in the middle of a response body."""

    def setup_method(self):
        self.server = TruncatingServer()
        self.server.start()
        self.url = f"http://127.0.0.1:{self.server.port}/body"

    def teardown_method(self):
        self.server.stop()

    def test_sync_read_error(self):
        """Test a short body surfaces as SourceError chained to requests."""
        with HTTPBody(self.url, chunk_size=4) as body:
            with pytest.raises(SourceError) as exc_info:
                collect_sync(body)
            assert isinstance(exc_info.value.__cause__, requests.exceptions.ChunkedEncodingError)
            assert body.bytes_read < 100

    def test_sync_read_error_with_limit(self):
        """Test the limit is never reached, so the error wins over partial data."""
        with HTTPBody(self.url, chunk_size=4) as body:
            with pytest.raises(SourceError):
                collect_with_limit_sync(body, 50)

    @pytest.mark.asyncio
    async def test_async_read_error(self):
        """Test a short body surfaces as SourceError chained to httpx."""
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(self.url, chunk_size=4, client=client) as body:
                with pytest.raises(SourceError) as exc_info:
                    await collect(body)
                assert isinstance(exc_info.value.__cause__, httpx.RemoteProtocolError)
                assert body.bytes_read < 100

    @pytest.mark.asyncio
    async def test_async_read_error_with_limit(self):
        async with httpx.AsyncClient() as client:
            async with HTTPAsyncBody(self.url, chunk_size=4, client=client) as body:
                with pytest.raises(SourceError):
                    await collect_with_limit(body, 50)


class TestHeaderHelpers:
    """Test Content-Length parsing and remaining-size hints."""

    @pytest.mark.parametrize("headers, expected", [
        ({"content-length": "1000"}, 1000),
        ({"content-length": "0"}, 0),
        ({}, None),
        ({"content-length": ""}, None),
        ({"content-length": "abc"}, None),
        ({"content-length": "-5"}, None),
    ])
    def test_content_length(self, headers, expected):
        assert content_length(headers) == expected

    def test_remaining_hint(self):
        assert remaining_hint(None, 10) == SizeHint()
        assert remaining_hint(100, 40) == SizeHint.exact(60)
        # more bytes than announced
        assert remaining_hint(100, 150) == SizeHint.exact(0)
