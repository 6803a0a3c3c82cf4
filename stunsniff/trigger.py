import threading
from .utils import *
from .settings import *
from .cmd_tools import launch_demux_tool

# Gate states.
TRIGGER_ARMED = 1
TRIGGER_FIRED = 2

class TriggerGate():
    """
    Launches the demux tool for the first peer address seen
    and ignores every one after. Both relay directions call
    fire() so the check-and-set happens under a lock. The
    launcher is called outside the lock and is expected to
    return straight away.
    """
    def __init__(self, launcher=launch_demux_tool, tool=SNIFF_CONF["tool"], demux_host=DEMUX_BIND_HOST, demux_port=DEMUX_BIND_PORT):
        self.launcher = launcher
        self.tool = tool
        self.demux_host = demux_host
        self.demux_port = demux_port
        self.state = TRIGGER_ARMED
        self.peer = None
        self.launch_handle = None
        self.lock = threading.Lock()
        self.fired_event = threading.Event()

    @property
    def fired(self):
        return self.state == TRIGGER_FIRED

    def fire(self, addr, tool=None):
        with self.lock:
            if self.state == TRIGGER_FIRED:
                return False

            self.state = TRIGGER_FIRED
            self.peer = addr

        tool = tool or self.tool
        log("> Peer address: {}:{}".format(addr.ip, addr.port))
        log("> Launching demux tool ({})...".format(tool))

        # A failed launch leaves the gate fired. No retries.
        self.launch_handle = sync_wrap_errors(
            self.launcher,
            [addr.ip, addr.port, self.demux_host, self.demux_port, tool]
        )
        self.fired_event.set()
        return True

    def wait(self, timeout=None):
        return self.fired_event.wait(timeout)
