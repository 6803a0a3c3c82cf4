import asyncio
import socket
from .errors import *
from .utils import *
from .net import *
from .settings import *
from .stun_utils import search_stun_peer

UPSTREAM = "upstream"
DOWNSTREAM = "downstream"

async def relay_pump(src, dest, buf, on_data=None, name=UPSTREAM):
    """
    Copy src -> dest until EOF. The buffer is reused for every
    read and the same bytes are passed to on_data only after
    they've been written out. Socket errors propagate.
    """
    loop = asyncio.get_running_loop()
    view = memoryview(buf)
    total = 0
    while 1:
        n = await loop.sock_recv_into(src, buf)
        if not n:
            log_debug("> {} EOF after {} bytes".format(name, total))
            return total

        chunk = view[:n]
        await loop.sock_sendall(dest, chunk)
        total += n

        # Inspection is synchronous so buf can't change under it.
        if on_data is not None:
            on_data(chunk)

async def open_remote(remote, conf=NET_CONF):
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(
            remote.host,
            remote.port,
            type=TCP
        )
    except socket.gaierror as e:
        raise ErrorRelay("Can't resolve {}".format(remote)) from e

    # Try every address the name resolves to.
    last_error = None
    for af, _, _, _, sockaddr in infos:
        sock = socket_factory(af, TCP, conf)
        try:
            await loop.sock_connect(sock, sockaddr)
            return sock
        except OSError as e:
            sock_close(sock)
            last_error = e

    raise ErrorRelay("Can't connect to {}".format(remote)) from last_error

class Relay():
    def __init__(self, client_sock, remote, gate=None, conf=SNIFF_CONF):
        self.client_sock = client_sock
        self.remote = Endpoint(*remote)
        self.gate = gate
        self.conf = conf
        self.remote_sock = None
        self.tasks = {}
        self.totals = {}
        self.error = None

    def scan(self, chunk):
        search_stun_peer(chunk, self.gate)

    async def run(self):
        """
        Returns True if the relay ended on a clean EOF and
        False if a direction failed. Either way both sockets
        are closed before returning.
        """
        self.client_sock.setblocking(False)
        self.remote_sock = await open_remote(self.remote)
        log("> Relaying to {}".format(self.remote))

        buf_size = self.conf["buf_size"]
        pumps = {
            UPSTREAM: (self.client_sock, self.remote_sock),
            DOWNSTREAM: (self.remote_sock, self.client_sock),
        }
        for name, socks in pumps.items():
            src, dest = socks
            self.tasks[name] = asyncio.create_task(
                relay_pump(src, dest, bytearray(buf_size), self.scan, name)
            )

        # One direction ending ends the relay.
        try:
            done, pending = await asyncio.wait(
                list(self.tasks.values()),
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in self.tasks.values():
                task.cancel()

            await asyncio.gather(
                *self.tasks.values(),
                return_exceptions=True
            )
            self.close()

        for name, task in self.tasks.items():
            if task not in done:
                continue

            exc = task.exception()
            if exc is None:
                self.totals[name] = task.result()
                continue

            self.error = exc
            log("> {} failed = {!r}".format(name, exc))

        return self.error is None

    def close(self):
        sock_close(self.remote_sock)
        sock_close(self.client_sock)
        self.remote_sock = None
