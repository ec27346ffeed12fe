"""Tests for the HTTP upload endpoint."""

import json
import socket
import threading
import urllib.error
import urllib.request
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from iperfcompare.config import AppConfig, ServerConfig, UploadConfig
from iperfcompare.server import (
    UPLOAD_PATH,
    MultipartError,
    create_server,
    parse_multipart,
)

BOUNDARY = "----iperfcompare-test"
CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


def _multipart(files: list[tuple[str, bytes]], field: str = "files") -> bytes:
    chunks = []
    for name, payload in files:
        chunks.append(
            (
                f"--{BOUNDARY}\r\n"
                f'Content-Disposition: form-data; name="{field}"; filename="{name}"\r\n'
                "Content-Type: application/json\r\n\r\n"
            ).encode()
            + payload
            + b"\r\n"
        )
    chunks.append(f"--{BOUNDARY}--\r\n".encode())
    return b"".join(chunks)


def _post(url: str, body: bytes, content_type: str = CONTENT_TYPE) -> tuple[int, Any]:
    request = urllib.request.Request(
        url, data=body, method="POST", headers={"Content-Type": content_type}
    )
    try:
        with urllib.request.urlopen(request, timeout=10) as response:
            return response.status, json.loads(response.read())
    except urllib.error.HTTPError as e:
        return e.code, json.loads(e.read())


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def base_url(upload_dir: Path) -> Iterator[str]:
    """Run the upload server on a free port for one test."""
    config = AppConfig(
        upload=UploadConfig(upload_dir=upload_dir),
        server=ServerConfig(host="127.0.0.1", port=0),
    )
    server = create_server(config)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


class TestParseMultipart:
    """Tests for parse_multipart."""

    def test_extracts_files_in_order(self) -> None:
        """Test that files of the upload field keep their order."""
        body = _multipart([("b.json", b'{"x": 1}'), ("a.json", b"{}")])

        parts = parse_multipart(CONTENT_TYPE, body)

        assert parts == [("b.json", b'{"x": 1}'), ("a.json", b"{}")]

    def test_ignores_other_fields(self) -> None:
        """Test that parts outside the upload field are skipped."""
        body = _multipart([("a.json", b"{}")], field="attachments")
        assert parse_multipart(CONTENT_TYPE, body) == []

    def test_strips_directories(self) -> None:
        """Test that client paths are reduced to their base name."""
        body = _multipart([("../../etc/run.json", b"{}")])
        assert parse_multipart(CONTENT_TYPE, body)[0][0] == "run.json"

    def test_rejects_other_content_types(self) -> None:
        """Test that non-multipart bodies are rejected."""
        with pytest.raises(MultipartError):
            parse_multipart("application/json", b"{}")


class TestUploadEndpoint:
    """Tests for POST /api/upload-multiple."""

    def test_successful_batch(
        self, base_url: str, upload_dir: Path, make_udp_record, make_tcp_record
    ) -> None:
        """Test the response payload and cleanup of stored files."""
        body = _multipart(
            [
                ("udp.json", json.dumps(make_udp_record()).encode()),
                ("tcp.json", json.dumps(make_tcp_record()).encode()),
            ]
        )

        status, payload = _post(base_url + UPLOAD_PATH, body)

        assert status == 200
        assert payload["filenames"] == ["udp.json", "tcp.json"]
        assert len(payload["all_stats"]) == 2
        assert payload["failures"] == []
        keys = [entry["key"] for entry in payload["comparison"]["layout"]]
        assert keys[0] == "throughput-chart"
        assert len(keys) % 2 == 0
        assert list(upload_dir.iterdir()) == []

    def test_partial_failure(self, base_url: str, make_udp_record) -> None:
        """Test that one broken file does not fail the request."""
        body = _multipart(
            [
                ("good.json", json.dumps(make_udp_record()).encode()),
                ("bad.json", b"{not json"),
            ]
        )

        status, payload = _post(base_url + UPLOAD_PATH, body)

        assert status == 200
        assert payload["filenames"] == ["good.json"]
        assert payload["failures"][0]["source_id"] == "bad.json"

    def test_empty_batch(self, base_url: str) -> None:
        """Test that a form without upload files is rejected."""
        body = _multipart([("notes.txt", b"hello")], field="notes")

        status, payload = _post(base_url + UPLOAD_PATH, body)

        assert status == 400
        assert payload["error"] == "No files were uploaded"

    def test_too_many_files(self, base_url: str, upload_dir: Path) -> None:
        """Test that oversized batches are rejected before storing."""
        body = _multipart([(f"{i}.json", b"{}") for i in range(7)])

        status, payload = _post(base_url + UPLOAD_PATH, body)

        assert status == 400
        assert "between 1 and 6" in payload["error"]
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_not_multipart(self, base_url: str) -> None:
        """Test that a plain JSON body is rejected."""
        status, payload = _post(base_url + UPLOAD_PATH, b"{}", "application/json")

        assert status == 400
        assert "multipart" in payload["error"]

    def test_unknown_path(self, base_url: str) -> None:
        """Test that other paths answer 404."""
        status, payload = _post(base_url + "/api/other", _multipart([]))

        assert status == 404
        assert payload["error"] == "Not Found"

    @pytest.mark.parametrize("length", ["abc", "-5"])
    def test_invalid_content_length(self, base_url: str, length: str) -> None:
        """Test that an unusable Content-Length header answers 400."""
        host, port = base_url.removeprefix("http://").split(":")
        request = (
            f"POST {UPLOAD_PATH} HTTP/1.1\r\n"
            f"Host: {host}\r\n"
            f"Content-Type: {CONTENT_TYPE}\r\n"
            f"Content-Length: {length}\r\n"
            "Connection: close\r\n\r\n"
        ).encode()

        with socket.create_connection((host, int(port)), timeout=10) as conn:
            conn.sendall(request)
            response = b""
            while chunk := conn.recv(4096):
                response += chunk

        head, _, body = response.partition(b"\r\n\r\n")
        assert head.split()[1] == b"400"
        assert json.loads(body)["error"] == "Invalid Content-Length header"
