import io

import pytest

from staticweb.controllers import (
    Dispatcher,
    StaticFileHandler,
    make_dispatcher,
    static_handler,
)
from staticweb.loader import FileLoader
from staticweb.protocols.exceptions import ResourceNotFound
from staticweb.protocols.http import parse_request_line

from .conftest import INDEX


def read_response(sink):
    head, _, body = sink.getvalue().partition(b"\r\n\r\n")
    status_line, *header_lines = head.split(b"\r\n")
    headers = dict(line.split(b": ", 1) for line in header_lines)
    return status_line, headers, body


def test_index(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    dispatcher.dispatch(parse_request_line("GET /index.html HTTP/1.1"), sink)
    status_line, headers, body = read_response(sink)
    assert status_line == b"HTTP/1.1 200 OK"
    assert int(headers[b"Content-Length"]) == len(INDEX)
    assert headers[b"Content-Type"] == b"text/html; charset=utf-8"
    assert body == INDEX


def test_root_serves_index(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    dispatcher.dispatch(parse_request_line("GET /?ref=home HTTP/1.1"), sink)
    assert read_response(sink)[2] == INDEX


def test_custom_index(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot), "/home.html")
    sink = io.BytesIO()
    dispatcher.dispatch(parse_request_line("GET / HTTP/1.1"), sink)
    assert read_response(sink)[2] == b"<p>home</p>"


def test_fallback_serves_files(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    dispatcher.dispatch(parse_request_line("GET /css/style.css HTTP/1.1"), sink)
    status_line, headers, body = read_response(sink)
    assert headers[b"Content-Type"] == b"text/css; charset=utf-8"
    assert body == b"body { color: red; }"


def test_head_has_no_body(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    dispatcher.dispatch(parse_request_line("HEAD /index.html HTTP/1.1"), sink)
    status_line, headers, body = read_response(sink)
    assert int(headers[b"Content-Length"]) == len(INDEX)
    assert body == b""


def test_no_route_is_not_found():
    calls = []
    dispatcher = Dispatcher({"/index.html": lambda line, sink: calls.append(line)})
    sink = io.BytesIO()
    with pytest.raises(ResourceNotFound):
        dispatcher.dispatch(parse_request_line("GET /missing.html HTTP/1.1"), sink)
    assert calls == []
    assert sink.getvalue() == b""


def test_missing_file_writes_nothing(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    with pytest.raises(ResourceNotFound) as excinfo:
        dispatcher.dispatch(parse_request_line("GET /missing.html HTTP/1.1"), sink)
    assert excinfo.value.status == 404
    assert sink.getvalue() == b""


def test_handler_invoked_exactly_once():
    calls = []
    dispatcher = Dispatcher()

    @dispatcher.route("/count")
    def count(request_line, sink):
        calls.append(request_line.query)
        return "handled"

    dispatcher.route("/other", lambda line, sink: calls.append("other"))
    line = parse_request_line("GET /count?n=1 HTTP/1.1")
    assert dispatcher.dispatch(line, io.BytesIO()) == "handled"
    assert calls == [{"n": "1"}]


def test_exact_route_wins_over_fallback(webroot):
    loader = FileLoader(webroot)
    dispatcher = Dispatcher(
        {"/about": static_handler("/home.html", loader)},
        fallback=StaticFileHandler(loader),
    )
    line = parse_request_line("GET /about HTTP/1.1")
    assert dispatcher.select(line) is dispatcher.routes["/about"]
    sink = io.BytesIO()
    dispatcher.dispatch(line, sink)
    assert read_response(sink)[2] == b"<p>home</p>"
    other = parse_request_line("GET /index.html HTTP/1.1")
    assert dispatcher.select(other) is dispatcher.fallback


def test_dispatch_ignores_method_for_routing(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    dispatcher.dispatch(parse_request_line("POST /index.html HTTP/1.1"), sink)
    assert read_response(sink)[0] == b"HTTP/1.1 200 OK"


def test_null_byte_in_path_is_not_found(webroot):
    dispatcher = make_dispatcher(FileLoader(webroot))
    sink = io.BytesIO()
    with pytest.raises(ResourceNotFound):
        dispatcher.dispatch(parse_request_line("GET /a%00b.html HTTP/1.1"), sink)
    assert sink.getvalue() == b""
