import socket
import struct
from collections import namedtuple
from .errors import *
from .utils import *

# Avoid annoying socket... to access vars.
AF_INET = socket.AF_INET
AF_INET6 = socket.AF_INET6
TCP = STREAM = SOCK_STREAM = socket.SOCK_STREAM
UDP = DGRAM = SOCK_DGRAM = socket.SOCK_DGRAM
IP4 = V4 = AF_INET
IP6 = V6 = AF_INET6

# Fine tune socket settings.
NET_CONF = {
    # Protocol family used for the socket.socket function.
    "sock_proto": 0,

    # Reuse address tuple for bind() socket call.
    "reuse_addr": False,

    # Whether to set SO_LINGER. None = off.
    # Non-none = linger value.
    "linger": None,

    # Listen backlog for server sockets.
    "backlog": 1,
}

# A (host, port) pair as configured or discovered.
class Endpoint(namedtuple("Endpoint", ["host", "port"])):
    __slots__ = ()

    @property
    def tup(self):
        return (self.host, self.port)

    def __str__(self):
        # IPv6 literals need brackets to separate the port.
        if ":" in str(self.host):
            return "[{}]:{}".format(self.host, self.port)

        return "{}:{}".format(self.host, self.port)

def socket_factory(af, sock_type=TCP, conf=NET_CONF):
    # Create socket.
    sock = socket.socket(af, sock_type, conf["sock_proto"])

    # Useful to cleanup sockets right away.
    if conf["linger"] is not None:
        # Enable linger and set it to its value.
        linger = struct.pack('ii', 1, conf["linger"])
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, linger)

    # Reuse port to avoid errors.
    if conf["reuse_addr"]:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    # The event loop does all the waiting.
    sock.setblocking(False)
    return sock

def sock_close(sock):
    if sock is None:
        return

    try:
        sock.close()
    except OSError:
        log_exception()

