import asyncio
import socket
import unittest
from unittest import main

from .errors import *
from .utils import log, log_debug, log_exception, setup_logging, async_wrap_errors, sync_wrap_errors
from .utils import to_b, to_s, to_h, b_to_i, xor_bufs, dict_child
from .net import *
from .settings import *
from .stun_defs import *
from .stun_utils import stun_peer_addrs, search_stun_peer
from .cmd_tools import demux_tool_args, run_demux_tool, launch_demux_tool
from .trigger import TriggerGate, TRIGGER_ARMED, TRIGGER_FIRED
from .relay import Relay, relay_pump, open_remote, UPSTREAM, DOWNSTREAM
from .daemon import SniffDaemon, DAEMON_CONF
from .entry_point import build_parser, args_to_conf, run_sniffer
