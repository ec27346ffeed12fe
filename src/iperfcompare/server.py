"""
Simple HTTP server for uploading measurement files.

Accepts a multipart batch of iperf3 JSON files, normalizes them and
answers with the per-source stats plus the comparison datasets.
"""

import json
import time
from email.message import Message
from email.parser import BytesParser
from email.policy import HTTP
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any

from iperfcompare.config.settings import AppConfig
from iperfcompare.errors import BatchSizeError
from iperfcompare.ingestion.batch import UploadedFile, process_batch
from iperfcompare.utils.logging import get_logger

log = get_logger(__name__)

UPLOAD_PATH = "/api/upload-multiple"
UPLOAD_FIELD = "files"


class MultipartError(ValueError):
    """Request body is not a usable multipart form."""


def parse_multipart(content_type: str, body: bytes) -> list[tuple[str, bytes]]:
    """
    Extract (filename, payload) pairs of the upload field.

    Args:
        content_type: Value of the request's Content-Type header.
        body: Raw request body.

    Returns:
        Files in the order they appear in the form.

    Raises:
        MultipartError: If the body is not multipart/form-data.
    """
    if not content_type.lower().startswith("multipart/form-data"):
        msg = "Expected multipart/form-data"
        raise MultipartError(msg)

    header = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode()
    message: Message = BytesParser(policy=HTTP).parsebytes(header + body)
    if not message.is_multipart():
        msg = "Malformed multipart body"
        raise MultipartError(msg)

    files = []
    for part in message.iter_parts():
        if part.get_param("name", header="content-disposition") != UPLOAD_FIELD:
            continue
        filename = part.get_filename()
        if not filename:
            continue
        payload = part.get_payload(decode=True) or b""
        files.append((Path(filename).name, payload))
    return files


class UploadHandler(BaseHTTPRequestHandler):
    """HTTP request handler for measurement uploads."""

    # Class variables set by server
    config: AppConfig = AppConfig()

    def do_OPTIONS(self) -> None:
        """Handle CORS preflight requests."""
        self.send_response(204)
        self._send_cors_headers()
        self.send_header("Access-Control-Allow-Methods", "POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def do_POST(self) -> None:
        """Handle POST requests."""
        if self.path == UPLOAD_PATH:
            self._handle_upload()
        else:
            self._send_json(404, {"error": "Not Found"})

    def do_GET(self) -> None:
        """Handle GET requests."""
        self._send_json(404, {"error": "Not Found"})

    def _handle_upload(self) -> None:
        """Store, process and clean up one uploaded batch."""
        upload = self.config.upload

        try:
            content_length = int(self.headers.get("Content-Length") or 0)
            if content_length < 0:
                msg = f"negative length {content_length}"
                raise ValueError(msg)
        except ValueError:
            self._send_json(400, {"error": "Invalid Content-Length header"})
            return
        body = self.rfile.read(content_length)

        try:
            parts = parse_multipart(self.headers.get("Content-Type", ""), body)
        except MultipartError as e:
            self._send_json(400, {"error": str(e)})
            return

        stored: list[UploadedFile] = []
        try:
            if not parts or len(parts) > upload.max_files:
                raise BatchSizeError(len(parts), upload.max_files)

            upload.upload_dir.mkdir(parents=True, exist_ok=True)
            stamp = int(time.time() * 1000)
            for index, (name, payload) in enumerate(parts):
                path = upload.upload_dir / f"{stamp}-{index}-{name}"
                path.write_bytes(payload)
                stored.append(UploadedFile(name=name, path=path))

            result = process_batch(stored, upload)
            response = result.to_dict()
            response["comparison"] = result.comparison().to_dict()
            self._send_json(200, response)

        except BatchSizeError as e:
            log.warning("Rejected upload batch", files=len(parts))
            self._send_json(400, {"error": str(e)})

        except Exception as e:
            log.error("Failed to process upload", error=str(e))
            self._send_json(500, {"error": "Internal server error"})

        finally:
            if upload.delete_after_processing:
                for uploaded in stored:
                    uploaded.path.unlink(missing_ok=True)

    def _send_cors_headers(self) -> None:
        self.send_header("Access-Control-Allow-Origin", self.config.server.cors_origin)

    def _send_json(self, status: int, payload: dict[str, Any]) -> None:
        """Send a JSON response, ignoring clients that already disconnected."""
        body = json.dumps(payload).encode()
        try:
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self._send_cors_headers()
            self.end_headers()
            self.wfile.write(body)
        except (ConnectionAbortedError, ConnectionResetError, BrokenPipeError):
            log.debug("Client disconnected before response", path=self.path)

    def log_message(self, format: str, *args: Any) -> None:
        """Override to use our logger."""
        _ = format, args
        log.debug("HTTP request", method=self.command, path=self.path)


def create_server(config: AppConfig) -> HTTPServer:
    """
    Create (but do not start) the upload server.

    Args:
        config: Application configuration.

    Returns:
        Bound HTTPServer; port 0 picks a free port.
    """
    handler = type("ConfiguredUploadHandler", (UploadHandler,), {"config": config})
    return HTTPServer((config.server.host, config.server.port), handler)


def start_upload_server(config: AppConfig) -> None:
    """
    Start the upload HTTP server and block until interrupted.

    Args:
        config: Application configuration.
    """
    server = create_server(config)
    host, port = server.server_address[:2]

    log.info(
        "Starting upload server",
        url=f"http://{host}:{port}{UPLOAD_PATH}",
        max_files=config.upload.max_files,
    )

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("Shutting down upload server")
    finally:
        server.server_close()
