import enum
import typing
from dataclasses import dataclass, field
from http import HTTPStatus
from urllib import parse

import iofree
from iofree import schema

from ..utils import run_parser_asyncio
from .exceptions import HTTPError, IOFailure, MalformedRequestLine, UnsupportedMethod

HTTP_VERSION = b"HTTP/1.1"
DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"


class HTTPMethod(enum.Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class RequestLine:
    method: HTTPMethod
    uri: str
    version: str
    query: typing.Dict[str, str] = field(default_factory=dict)

    def __repr__(self):
        return (
            f"RequestLine(method={self.method}, uri={self.uri!r}, "
            f"version={self.version!r}, query={self.query!r})"
        )


def parse_query(qs: str) -> typing.Dict[str, str]:
    """Decode a raw query string into a name -> value mapping.

    Segments are separated by ``&`` and split on the first ``=``; a
    segment without ``=`` maps to an empty value and empty segments are
    skipped. Names and values are percent-decoded with ``+`` read as a
    space; malformed escapes such as ``%zz`` are kept as they are. When
    a name repeats, the last value wins.
    """
    query = {}
    for segment in qs.split("&"):
        if not segment:
            continue
        key, _, value = segment.partition("=")
        query[parse.unquote_plus(key)] = parse.unquote_plus(value)
    return query


def split_target(target: str) -> typing.Tuple[str, str]:
    if target.startswith("/"):
        target, _, _ = target.partition("#")
        path, _, qs = target.partition("?")
    elif target.lower().startswith(("http://", "https://")):
        url = parse.urlsplit(target)
        path, qs = url.path or "/", url.query
    else:
        raise MalformedRequestLine(f"bad request target: {target!r}")
    return parse.unquote(path), qs


def parse_request_line(line: typing.Union[str, bytes]) -> RequestLine:
    if isinstance(line, bytes):
        line = line.decode("iso-8859-1")
    tokens = line.split()
    if len(tokens) != 3:
        raise MalformedRequestLine(f"expect 3 tokens, got {len(tokens)}: {line!r}")
    method_token, target, version = tokens
    try:
        method = HTTPMethod(method_token)
    except ValueError:
        raise UnsupportedMethod(f"unknown method: {method_token!r}") from None
    uri, qs = split_target(target)
    return RequestLine(method, uri, version, parse_query(qs))


class HTTPRequest(schema.BinarySchema):
    "request head: the parsed request line plus header fields"
    head = schema.EndWith(b"\r\n\r\n")

    def __post_init__(self):
        first_line, *header_lines = self.head.split(b"\r\n")
        self.request_line = parse_request_line(first_line)
        self.headers = {}
        for line in header_lines:
            name, sep, value = line.partition(b":")
            if sep:
                self.headers[name.strip().lower()] = value.strip()

    def __repr__(self):
        return f"{self.__class__.__name__}({self.request_line!r})"


async def read_request(reader) -> typing.Optional[HTTPRequest]:
    """Read and parse one request head from an asyncio StreamReader.

    Returns None when the peer closes before sending anything. A head
    cut short by EOF or larger than the size limit is a
    MalformedRequestLine.
    """
    parser = HTTPRequest.get_parser()
    try:
        return await run_parser_asyncio(parser, reader)
    except iofree.ParseError as e:
        cause = e.__cause__ or e.__context__
        if isinstance(cause, HTTPError):
            raise cause from None
        if not parser.readall().strip():
            return None
        raise MalformedRequestLine(f"bad request head: {e}") from e


def reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


class ResponseWriter:
    """Serializes responses onto a writable byte sink.

    The writer holds no state, so one instance may be shared by every
    connection. A sink only needs ``write(bytes)``; ``flush()`` is
    called when the sink has one. Failures of the sink surface as
    :class:`IOFailure` and are never retried.
    """

    def write_status_and_headers(
        self,
        sink,
        status: int,
        content_length: int,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ):
        head = (
            b"%b %d %b\r\n"
            b"Content-Length: %d\r\n"
            b"Content-Type: %b\r\n"
            b"Connection: close\r\n\r\n"
            % (
                HTTP_VERSION,
                status,
                reason_phrase(status).encode(),
                content_length,
                content_type.encode("latin-1"),
            )
        )
        self._write(sink, head)
        self._flush(sink)

    def write_body(self, sink, body: bytes):
        self._write(sink, bytes(body))

    def write_response(
        self, sink, status: int, body: bytes, content_type: str = DEFAULT_CONTENT_TYPE
    ):
        self.write_status_and_headers(sink, status, len(body), content_type)
        self.write_body(sink, body)

    def write_error(self, sink, status: int):
        body = f"{status} {reason_phrase(status)}\n".encode()
        self.write_response(sink, status, body, "text/plain; charset=utf-8")

    @staticmethod
    def _write(sink, data: bytes):
        try:
            sink.write(data)
        except OSError as e:
            raise IOFailure(f"write failed: {e}") from e

    @staticmethod
    def _flush(sink):
        flush = getattr(sink, "flush", None)
        if flush is None:
            return
        try:
            flush()
        except OSError as e:
            raise IOFailure(f"flush failed: {e}") from e


writer = ResponseWriter()
