import argparse
import asyncio
import logging
import os
import resource
import socket
import weakref
from urllib import parse

from . import __doc__ as desc
from . import __version__, gvars
from .controllers import make_dispatcher
from .loader import FileLoader
from .server import server_protos
from .utils import parse_addr

connections = weakref.WeakSet()


def TcpProtoFactory(cls, **kwargs):
    async def client_handler(reader, writer):
        handler = cls(**kwargs)
        connections.add(handler)
        return await handler(reader, writer)

    return client_handler


def get_dispatcher(qs):
    root = qs["root"][0] if "root" in qs else "."
    if not os.path.isdir(root):
        raise argparse.ArgumentTypeError(f"document root is not a directory: {root}")
    index = qs["index"][0] if "index" in qs else "/index.html"
    if not index.startswith("/"):
        index = "/" + index
    return make_dispatcher(FileLoader(root), index)


def get_server(uri):
    url = parse.urlparse(uri)
    if url.scheme not in server_protos:
        raise argparse.ArgumentTypeError(f"unsupported scheme: {uri}")
    proto = server_protos[url.scheme]
    host, port = parse_addr(url.netloc)
    if port == -1:
        port = gvars.default_ports.get(url.scheme, gvars.default_port)
    bind_addr = (str(host), port)
    qs = parse.parse_qs(url.query)
    dispatcher = get_dispatcher(qs)
    family = socket.AF_INET6 if ":" in bind_addr[0] else socket.AF_INET
    server_sock = socket.create_server(bind_addr, family=family, backlog=1024)
    real_ip, real_port, *_ = server_sock.getsockname()
    server = run_server(
        server_sock,
        TcpProtoFactory(proto, bind_addr=(real_ip, real_port), dispatcher=dispatcher),
    )
    return server, (real_ip, real_port), url.scheme


async def run_server(sock, client_handler):
    server = await asyncio.start_server(
        client_handler, sock=sock, limit=gvars.MAX_HEAD_SIZE
    )
    async with server:
        await server.serve_forever()


async def multi_server(*servers):
    addrs = []
    tasks = []
    for server, addr, scheme in servers:
        tasks.append(asyncio.ensure_future(server))
        addrs.append((*addr, scheme))

    address = ", ".join(f"{scheme}://{host}:{port}" for host, port, scheme in addrs)
    pid = os.getpid()
    gvars.logger.info(f"{__package__}/{__version__} listen on {address} pid: {pid}")
    gvars.logger.debug(f"sudo lsof -p {pid} -P | grep -e TCP -e STREAM")
    await asyncio.gather(*tasks)


def main(arguments=None):
    parser = argparse.ArgumentParser(
        description=desc, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "-v", dest="verbose", action="count", default=0, help="print verbose output"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("server", nargs="+", type=get_server)
    args = parser.parse_args(arguments)
    if args.verbose == 0:
        level = logging.ERROR
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    gvars.logger.setLevel(level)
    try:
        resource.setrlimit(resource.RLIMIT_NOFILE, (50000, 50000))
    except Exception:
        gvars.logger.warning("Require root permission to allocate resources")
    try:
        asyncio.run(multi_server(*args.server))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        gvars.logger.exception(str(e))
        for conn in connections:
            gvars.logger.debug(f"| {conn}")


if __name__ == "__main__":
    main()
