import asyncio

import httptools

from . import gvars


class HTTPResponse:
    def __init__(self):
        self.done = False
        self.status = None
        self.headers = {}
        self.header_size = 0
        self.body = bytearray()

    @property
    def size(self):
        return self.header_size + len(self.body)

    def on_header(self, name: bytes, value: bytes):
        self.header_size += len(name) + len(value)
        self.headers[name.decode("latin-1").lower()] = value.decode("latin-1")

    def on_body(self, body: bytes):
        self.body.extend(body)

    def on_message_complete(self):
        self.done = True


async def http_request(
    host: str,
    port: int,
    path: str = "/",
    method: str = "GET",
    headers: list = None,
    response_cls=None,
):
    response_cls = response_cls or HTTPResponse
    reader, writer = await asyncio.open_connection(host, port)
    try:
        header_list = [f"Host: {host}:{port}".encode()]
        for header in headers or []:
            if isinstance(header, str):
                header = header.encode()
            header_list.append(header)
        data = b"%b %b HTTP/1.1\r\n%b\r\n\r\n" % (
            method.upper().encode(),
            path.encode(),
            b"\r\n".join(header_list),
        )
        writer.write(data)
        await writer.drain()
        response = response_cls()
        parser = httptools.HttpResponseParser(response)
        while not response.done:
            data = await reader.read(gvars.PACKET_SIZE)
            if not data:
                if method.upper() == "HEAD" and parser.get_status_code():
                    break
                raise Exception("Incomplete response")
            parser.feed_data(data)
        response.status = parser.get_status_code()
        return response
    finally:
        writer.close()
        await writer.wait_closed()
