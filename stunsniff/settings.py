import os
from .utils import *

"""
Defaults proxy from
localhost:6000 to a TURN server on localhost:3478
and launch 'stundemux' once a peer is discovered.

Every value can be overridden from the environment
and then again from the command line.
"""

# Where the demux tool should bind its UDP socket.
DEMUX_BIND_HOST = "127.0.0.1"
DEMUX_BIND_PORT = 6001

# Bytes per read for each relay direction.
RELAY_BUF_SIZE = 1024 * 1024

SNIFF_CONF = {
    # TURN / STUN server to proxy to.
    "remote_host": "localhost",
    "remote_port": 3478,

    # Address the proxy listens on.
    "local_host": "localhost",
    "local_port": 6000,

    # Tool to launch if a peer address is found.
    "tool": "stundemux",

    # Fixed endpoint handed to the tool.
    "demux_host": DEMUX_BIND_HOST,
    "demux_port": DEMUX_BIND_PORT,

    # Per-direction read buffer.
    "buf_size": RELAY_BUF_SIZE,
}

ENV_MAPPINGS = {
    "STUNSNIFF_REMOTE_HOST": ("remote_host", str),
    "STUNSNIFF_REMOTE_PORT": ("remote_port", int),
    "STUNSNIFF_LOCAL_HOST": ("local_host", str),
    "STUNSNIFF_LOCAL_PORT": ("local_port", int),
    "STUNSNIFF_TOOL": ("tool", str),
}

def conf_from_env(environ=None):
    environ = os.environ if environ is None else environ
    out = {}
    for env_var, mapping in ENV_MAPPINGS.items():
        key, cast = mapping
        value = environ.get(env_var)
        if value is None:
            continue

        try:
            out[key] = cast(value)
        except ValueError:
            raise ValueError(
                "{} = {!r} isn't a valid {}".format(
                    env_var,
                    value,
                    cast.__name__
                )
            )

        log_debug("> Conf {} = {} from {}".format(key, value, env_var))

    return out

def validate_conf(conf):
    for key in ["remote_port", "demux_port"]:
        if not valid_port(conf[key]):
            raise ValueError("{} out of range: {}".format(key, conf[key]))

    # Local port 0 = OS assigned port.
    if conf["local_port"] != 0 and not valid_port(conf["local_port"]):
        raise ValueError("local_port out of range: {}".format(conf["local_port"]))

    if conf["buf_size"] <= 0:
        raise ValueError("buf_size must be positive")

    if not conf["tool"]:
        raise ValueError("no demux tool given")

    return conf

def load_conf(overrides={}, environ=None):
    # Defaults < environment < explicit overrides.
    conf = dict_child(conf_from_env(environ), SNIFF_CONF)
    conf = dict_child(overrides, conf)
    return validate_conf(conf)
