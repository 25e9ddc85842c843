import ipaddress

import iofree

from . import gvars


async def run_parser_asyncio(parser, reader, limit=gvars.MAX_HEAD_SIZE):
    parser.send(b"")
    received = 0
    while True:
        for _, _, exc, result in parser:
            if exc:
                raise exc
            if result is not iofree._no_result:
                return result
        data = await reader.read(gvars.PACKET_SIZE)
        if not data:
            raise iofree.ParseError("need data")
        received += len(data)
        if received > limit:
            raise iofree.ParseError(f"more than {limit} bytes without result")
        parser.send(data)


def parse_addr(s):
    host, _, port = s.rpartition(":")
    port = -1 if not port else int(port)
    if not host:
        host = "0.0.0.0"
    elif len(host) >= 4 and host[0] == "[" and host[-1] == "]":
        host = host[1:-1]
    try:
        return (ipaddress.ip_address(host), port)
    except ValueError:
        return (host, port)


def human_bytes(val: int) -> str:
    if val < 1024:
        return f"{val:.0f}Bytes"
    elif val < 1048576:
        return f"{val/1024:.1f}KB"
    else:
        return f"{val/1048576:.1f}MB"


def show(addr):
    return f"{addr[0]}:{addr[1]}"
