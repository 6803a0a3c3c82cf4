"""
Passive STUN inspection for relayed buffers.

Most buffers that pass through the relay aren't STUN at
all (or are only part of a message) so a decode failure
is the normal case and is dropped without a word. When
a whole message does decode, every XOR-PEER-ADDRESS in
it is unmasked and handed to the trigger gate.
"""

from .errors import *
from .utils import *
from .stun_defs import *

def stun_peer_addrs(buf):
    # Raises ErrorSTUNDecode if buf isn't a STUN message.
    msg, _ = STUNMsg.unpack(buf)
    addrs = []
    for attr in msg.get_attrs(STUNAttrs.XorPeerAddress):
        # A short value only spoils that attribute.
        try:
            addr = STUNAddrTup.unpack_peer(attr.value, msg.magic_cookie)
        except ErrorPeerAddress:
            log_debug("> Skipping short XOR peer addr = {}".format(
                to_h(attr.value)
            ))
            continue

        addrs.append(addr)

    return addrs

def search_stun_peer(buf, gate=None, tool=None):
    """
    Never raises. The bytes were already forwarded by the
    time this runs so nothing here may disturb the relay.
    """
    try:
        addrs = stun_peer_addrs(buf)
    except ErrorSTUNDecode:
        return []
    except Exception:
        log_exception()
        return []

    if gate is not None:
        for addr in addrs:
            sync_wrap_errors(gate.fire, [addr, tool])

    return addrs
