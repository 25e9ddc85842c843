import asyncio

from . import gvars
from .controllers import Dispatcher
from .protocols import http
from .protocols.exceptions import HTTPError, IOFailure
from .utils import human_bytes, show


class StreamSink:
    "synchronous byte sink over an asyncio StreamWriter"

    def __init__(self, writer: asyncio.StreamWriter):
        self.writer = writer
        self.bytes_written = 0

    def write(self, data: bytes):
        if self.writer.is_closing():
            raise ConnectionResetError("connection is closing")
        self.writer.write(data)
        self.bytes_written += len(data)

    async def drain(self):
        try:
            await self.writer.drain()
        except ConnectionError as e:
            raise IOFailure(f"drain failed: {e}") from e


class HTTPServer:
    proto = "HTTP"
    client_addr = ("unknown", -1)
    request_line = None
    status = None

    def __init__(self, bind_addr, dispatcher: Dispatcher):
        self.bind_addr = bind_addr
        self.dispatcher = dispatcher

    @property
    def client_address(self) -> str:
        return show(self.client_addr)

    @property
    def bind_address(self) -> str:
        return show(self.bind_addr)

    def __repr__(self):
        return f"{self.__class__.__name__}({self})"

    def __str__(self):
        request = ""
        if self.request_line is not None:
            request = f" -- {self.request_line.method} {self.request_line.uri}"
        return f"{self.client_address} -- {self.proto} -- {self.bind_address}{request}"

    async def __call__(self, reader, writer):
        self.client_addr = writer.get_extra_info("peername") or self.client_addr
        sink = StreamSink(writer)
        try:
            await self._run(reader, sink)
        except (IOFailure, ConnectionError) as e:
            gvars.logger.debug(f"{self} {e}")
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                gvars.logger.debug(f"{self} close: {e}")

    async def _run(self, reader, sink: StreamSink):
        try:
            request = await http.read_request(reader)
            if request is None:
                gvars.logger.debug(f"{self} closed without request")
                return
            self.request_line = request.request_line
            user_agent = request.headers.get(b"user-agent", b"-").decode("latin-1")
            gvars.logger.debug(f"{self} user-agent: {user_agent}")
            self.dispatcher.dispatch(self.request_line, sink)
            self.status = 200
        except HTTPError as e:
            gvars.logger.debug(f"{self} {e.__class__.__name__}: {e}")
            self.status = e.status
            if sink.bytes_written:
                return
            http.writer.write_error(sink, e.status)
        except (IOFailure, ConnectionError):
            raise
        except Exception:
            gvars.logger.exception(f"{self} handler failed")
            self.status = 500
            if sink.bytes_written:
                return
            http.writer.write_error(sink, 500)
        await sink.drain()
        gvars.logger.info(f"{self} -- {self.status} {human_bytes(sink.bytes_written)}")


server_protos = {"http": HTTPServer}
