from ..loader import FileLoader
from ..protocols.http import HTTPMethod, RequestLine, writer


def serve(loader: FileLoader, path: str, request_line: RequestLine, sink):
    body = loader.load(path)
    writer.write_status_and_headers(sink, 200, len(body), loader.content_type(path))
    if request_line.method is not HTTPMethod.HEAD:
        writer.write_body(sink, body)


def static_handler(path: str, loader: FileLoader):
    "handler which always serves the resource at ``path``"

    def handler(request_line, sink):
        serve(loader, path, request_line, sink)

    handler.__qualname__ = f"static_handler({path!r})"
    return handler


class StaticFileHandler:
    "serves the requested uri itself from the loader's document root"

    def __init__(self, loader: FileLoader):
        self.loader = loader

    def __repr__(self):
        return f"{self.__class__.__name__}({self.loader.root!r})"

    def __call__(self, request_line: RequestLine, sink):
        serve(self.loader, request_line.uri, request_line, sink)
