import typing

from .. import gvars
from ..protocols.exceptions import ResourceNotFound
from ..protocols.http import RequestLine

Handler = typing.Callable[[RequestLine, typing.Any], None]


class Dispatcher:
    """Routes a parsed request line to exactly one handler.

    Routes are exact URI matches; ``fallback`` serves whatever no route
    claims. Without a match ``dispatch`` raises ResourceNotFound and
    nothing is written, so the caller can still render a 404.
    """

    def __init__(
        self,
        routes: typing.Dict[str, Handler] = None,
        fallback: typing.Optional[Handler] = None,
    ):
        self.routes = dict(routes or {})
        self.fallback = fallback

    def __repr__(self):
        return f"{self.__class__.__name__}({sorted(self.routes)})"

    def route(self, uri: str, handler: Handler = None):
        if handler is not None:
            self.routes[uri] = handler
            return handler

        def decorator(func):
            self.routes[uri] = func
            return func

        return decorator

    def select(self, request_line: RequestLine) -> Handler:
        handler = self.routes.get(request_line.uri, self.fallback)
        if handler is None:
            raise ResourceNotFound(f"no handler for {request_line.uri}")
        return handler

    def dispatch(self, request_line: RequestLine, sink):
        handler = self.select(request_line)
        gvars.logger.debug(f"{request_line.method} {request_line.uri} -> {handler!r}")
        return handler(request_line, sink)
