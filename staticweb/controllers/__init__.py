from ..loader import FileLoader
from .dispatcher import Dispatcher, Handler
from .static import StaticFileHandler, static_handler

__all__ = ["Dispatcher", "Handler", "StaticFileHandler", "static_handler", "make_dispatcher"]


def make_dispatcher(loader: FileLoader, index: str = "/index.html") -> Dispatcher:
    index_handler = static_handler(index, loader)
    return Dispatcher(
        routes={"/": index_handler, index: index_handler},
        fallback=StaticFileHandler(loader),
    )
