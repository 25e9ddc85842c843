import mimetypes
import os.path

from .protocols.exceptions import ResourceNotFound

DEFAULT_CONTENT_TYPE = "application/octet-stream"
TEXT_TYPES = ("text/", "application/javascript", "application/json")


class FileLoader:
    """Loads resources from a document root.

    A URI path is mapped below ``root``; anything that resolves outside
    of it, a directory or a missing file raises ResourceNotFound.
    """

    def __init__(self, root="."):
        self.root = os.path.realpath(root)

    def __repr__(self):
        return f"{self.__class__.__name__}({self.root!r})"

    def resolve(self, uri: str) -> str:
        if "\x00" in uri:
            raise ResourceNotFound(f"null byte in path: {uri!r}")
        relative = os.path.normpath(uri.lstrip("/")) if uri.strip("/") else ""
        try:
            path = os.path.realpath(os.path.join(self.root, relative))
        except ValueError as e:
            raise ResourceNotFound(f"bad path {uri!r}: {e}") from e
        if os.path.commonpath([self.root, path]) != self.root:
            raise ResourceNotFound(f"outside of document root: {uri}")
        if not os.path.isfile(path):
            raise ResourceNotFound(f"no such resource: {uri}")
        return path

    def load(self, uri: str) -> bytes:
        path = self.resolve(uri)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as e:
            raise ResourceNotFound(f"can not read {uri}: {e}") from e

    def content_type(self, uri: str) -> str:
        ctype, _ = mimetypes.guess_type(uri)
        if ctype is None:
            return DEFAULT_CONTENT_TYPE
        if ctype.startswith(TEXT_TYPES):
            return f"{ctype}; charset=utf-8"
        return ctype
