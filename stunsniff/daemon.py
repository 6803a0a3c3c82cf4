import asyncio
import socket
from .errors import *
from .utils import *
from .net import *
from .settings import *
from .trigger import TriggerGate
from .relay import Relay

DAEMON_CONF = dict_child({
    "reuse_addr": True
}, NET_CONF)

class SniffDaemon():
    """
    Listens on the local endpoint, takes exactly one client
    and stops listening before relaying it to the remote
    server. There is no accept loop: one run = one client.
    """
    def __init__(self, conf=SNIFF_CONF, gate=None, net_conf=DAEMON_CONF):
        self.conf = conf
        self.net_conf = net_conf
        self.gate = gate or TriggerGate(
            tool=conf["tool"],
            demux_host=conf["demux_host"],
            demux_port=conf["demux_port"]
        )
        self.sock = None
        self.relay = None
        self.listen_ep = None
        self.client_tup = None

    async def listen(self):
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(
            self.conf["local_host"],
            self.conf["local_port"],
            type=TCP,
            flags=socket.AI_PASSIVE
        )

        # glibc often lists ::1 before 127.0.0.1 for localhost.
        # Clients expect the v4 address so bind that first.
        infos = sorted(infos, key=lambda info: info[0] != IP4)

        # Bind the first address that works.
        last_error = None
        for af, _, _, _, sockaddr in infos:
            sock = socket_factory(af, TCP, self.net_conf)
            try:
                sock.bind(sockaddr)
                sock.listen(self.net_conf["backlog"])
            except OSError as e:
                sock_close(sock)
                last_error = e
                continue

            self.sock = sock
            self.listen_ep = Endpoint(*sock.getsockname()[:2])
            log("> Listening on {}".format(self.listen_ep))
            return self.listen_ep

        error = "Can't listen on {}:{}".format(
            self.conf["local_host"],
            self.conf["local_port"]
        )
        raise ErrorListen(error) from last_error

    async def accept(self):
        if self.sock is None:
            await self.listen()

        # Only one client per run so stop listening after it.
        loop = asyncio.get_running_loop()
        try:
            client_sock, self.client_tup = await loop.sock_accept(self.sock)
        finally:
            self.stop_listening()

        log("> Client connected from {}".format(
            Endpoint(*self.client_tup[:2])
        ))
        return client_sock

    async def serve_one(self):
        client_sock = await self.accept()
        remote = Endpoint(self.conf["remote_host"], self.conf["remote_port"])
        self.relay = Relay(client_sock, remote, self.gate, self.conf)
        try:
            return await self.relay.run()
        except BaseException:
            sock_close(client_sock)
            raise

    def stop_listening(self):
        sock_close(self.sock)
        self.sock = None

    async def close(self):
        self.stop_listening()
        if self.relay is not None:
            self.relay.close()
