"""
Only as much of STUN (RFC 5389) as the sniffer needs:
a header + TLV attribute decoder for inspecting relayed
buffers and an encoder that builds the same messages
(used for tests and for replaying captured traffic.)

https://datatracker.ietf.org/doc/html/rfc5389#section-6
https://datatracker.ietf.org/doc/html/rfc5766#section-14.3
"""

from struct import pack
import os
import socket
from .errors import *
from .utils import *
from .net import *

STUN_HDR_LEN = 20
STUN_ATTR_HDR_LEN = 4
STUN_TXID_LEN = 12
STUN_MAGIC_COOKIE = b"\x21\x12\xA4\x42"
# Port is masked by the top half of the cookie, the IP by all of it.
stun_xor_mask = lambda cookie: b'\x00\x00' + cookie[:2] + cookie
STUN_MAGIC_XOR = stun_xor_mask(STUN_MAGIC_COOKIE)

# Family, port and an IPv4 address.
STUN_PEER_ADDR_MIN_LEN = 8

def _get_const_name(cls, val, type_: type) -> str:
    for attr_name in dir(cls):
        attr = getattr(cls, attr_name)
        if isinstance(attr, type_) and attr == val:
            return attr_name
    return ''

class STUNMsgTypes:
    Binding             = b"\x00\x01"
    SharedSecret        = b"\x00\x02" # Reserved - RFC5389

    # https://tools.ietf.org/html/rfc5766#section-13
    Allocate            = b"\x00\x03"
    Refresh             = b"\x00\x04"
    Send                = b"\x00\x06"
    Data                = b"\x00\x07"
    CreatePermission    = b"\x00\x08"
    ChannelBind         = b"\x00\x09"

    # https://tools.ietf.org/html/rfc6062#section-6.1
    Connect             = b"\x00\x0a" # RFC6062
    ConnectionBind      = b"\x00\x0b" # RFC6062
    ConnectionAttempt   = b"\x00\x0c" # RFC6062

    get = classmethod(lambda cls, val, type_=bytes: _get_const_name(cls, val, type_))

class STUNAttrs:
    MappedAddress       = b"\x00\x01" # RFC5389
    Username            = b"\x00\x06" # RFC5389
    MessageIntegrity    = b"\x00\x08" # RFC5389
    ErrorCode           = b"\x00\x09" # RFC5389
    UnknownAttribute    = b"\x00\x0A" # RFC5389
    ChannelNumber       = b"\x00\x0C" # RFC5766
    Lifetime            = b"\x00\x0D" # RFC5766
    XorPeerAddress      = b"\x00\x12" # RFC5766
    Data                = b"\x00\x13" # RFC5766
    Realm               = b"\x00\x14" # RFC5389
    Nonce               = b"\x00\x15" # RFC5389
    XorRelayedAddress   = b"\x00\x16" # RFC5766
    RequestedTransport  = b"\x00\x19" # RFC5766
    XorMappedAddress    = b"\x00\x20" # RFC5389
    ConnectionID        = b"\x00\x2A" # RFC6062
    Software            = b"\x80\x22" # RFC5389
    Fingerprint         = b"\x80\x28" # RFC5389

    get = classmethod(lambda cls, val, type_=bytes: _get_const_name(cls, val, type_))

class STUNMsgCodes:
    Request     = b"\x00\x00"
    Indication  = b"\x00\x10"
    SuccessResp = b"\x01\x00"
    ErrorResp   = b"\x01\x10"

    get = classmethod(lambda cls, val, type_=bytes: _get_const_name(cls, val, type_))

# Message class bits are spread over the type field (C1 / C0.)
STUN_CLASS_MASK = b"\x01\x10"
STUN_METHOD_MASK = b"\x3E\xEF"

# Rule of 4:
# https://tools.ietf.org/html/rfc5766#section-14
stun_pad_len = lambda n: (4 - n % 4) % 4

class STUNAttr:
    def __init__(self, attr_type, value):
        self.attr_type = bytes(attr_type)
        self.value = bytes(value)

    def __eq__(self, other):
        if not isinstance(other, STUNAttr):
            return NotImplemented

        return (self.attr_type, self.value) == (other.attr_type, other.value)

    def __repr__(self):
        name = STUNAttrs.get(self.attr_type) or to_h(self.attr_type)
        return "STUNAttr({}, {})".format(name, to_h(self.value))

class STUNAddrTup:
    def __init__(self, ip=None, port=None, af=IP4, magic_cookie=STUN_MAGIC_COOKIE):
        self.ip = ip
        self.port = port
        self.af = af
        self.magic_cookie = magic_cookie

    @property
    def tup(self):
        return (self.ip, self.port)

    @staticmethod
    def get_addr_bufs(attr_data):
        port_buf = attr_data[2:4]
        ip_buf = attr_data[4:8]
        return (ip_buf, port_buf)

    def decode(self, attr_data):
        """
        Only the magic cookie is used as the mask. That is all
        an IPv4 XOR address needs. IPv6 would also need the
        txid but those peers aren't supported.
        """
        if len(attr_data) < STUN_PEER_ADDR_MIN_LEN:
            raise ErrorPeerAddress(
                "XOR address needs {} bytes, got {}".format(
                    STUN_PEER_ADDR_MIN_LEN,
                    len(attr_data)
                )
            )

        # UnXOR port + IP in one pass.
        data = xor_bufs(attr_data[:8], stun_xor_mask(self.magic_cookie))
        ip_buf, port_buf = STUNAddrTup.get_addr_bufs(data)
        self.port = b_to_i(port_buf, 'big')
        self.ip = socket.inet_ntop(IP4, ip_buf)
        return self

    def encode(self):
        ip_b = socket.inet_pton(IP4, self.ip)
        buf = bytearray().join([
            b"\0\1",
            memoryview(pack('!H', self.port)),
            ip_b
        ])

        # XOR is its own inverse.
        return xor_bufs(buf, stun_xor_mask(self.magic_cookie))

    @staticmethod
    def unpack_peer(attr_data, magic_cookie=STUN_MAGIC_COOKIE):
        return STUNAddrTup(magic_cookie=magic_cookie).decode(attr_data)

    def __eq__(self, other):
        if not isinstance(other, STUNAddrTup):
            return NotImplemented

        return self.tup == other.tup

    def __repr__(self):
        return "STUNAddrTup({!r}, {!r})".format(self.ip, self.port)

    def __str__(self):
        return '{}:{}'.format(self.ip, self.port)

class STUNMsg:
    def __init__(self, msg_type=STUNMsgTypes.Binding, msg_code=STUNMsgCodes.Request, txn_id=None):
        self.msg_code = msg_code
        self.msg_type = msg_type # type: bytes
        self.msg_len = 0 # type: int
        self.txn_id = txn_id or os.urandom(STUN_TXID_LEN) # type: bytes
        self.magic_cookie = STUN_MAGIC_COOKIE
        self.attrs = []

    def write_attr(self, attr: bytes, *data, fmt: str = None):
        # process data -> bytes
        if fmt:
            data = pack(fmt, *data)
        else:
            data = data[0]
            if isinstance(data, STUNAddrTup):
                data = data.encode()

        self.attrs.append(STUNAttr(attr, to_b(data)))
        self.msg_len += STUN_ATTR_HDR_LEN + len(data) + stun_pad_len(len(data))
        return self

    def get_attrs(self, attr_type):
        return [attr for attr in self.attrs if attr.attr_type == attr_type]

    def pack(self) -> bytes:
        buf = bytearray()
        for attr in self.attrs:
            padding = b'\x00' * stun_pad_len(len(attr.value))
            buf += bytearray().join([
                memoryview(attr.attr_type),
                memoryview(pack("!H", len(attr.value))),
                memoryview(attr.value),
                memoryview(padding)
            ])

        # Type field interleaves the method and class bits.
        msg_type = b_and(b_or(self.msg_type, self.msg_code), b"\x3F\xFF")
        return bytes().join([
            msg_type,
            pack("!H", len(buf)),
            self.magic_cookie,
            self.txn_id,
            buf
        ])

    def decode(self, msg):
        """
        Structural checks only: header size, leading zero bits,
        magic cookie, body length and attribute bounds. No
        integrity or fingerprint checks. Trailing bytes after
        the message are returned to the caller.
        """
        msg = memoryview(msg)
        msg_len = len(msg)
        if msg_len < STUN_HDR_LEN:
            raise ErrorSTUNDecode("Buffer too short for STUN header.")

        # First two bits of every STUN message are zero.
        if msg[0] & 0xC0:
            raise ErrorSTUNDecode("Invalid STUN msg type bits.")

        if bytes(msg[4:8]) != STUN_MAGIC_COOKIE:
            raise ErrorSTUNDecode("Invalid STUN magic cookie.")

        # Unpack message fields.
        msg_type = bytes(msg[0:2])
        self.msg_code = b_and(msg_type, STUN_CLASS_MASK)
        self.msg_type = b_and(msg_type, STUN_METHOD_MASK)
        self.msg_len = b_to_i(msg[2:4], 'big')
        self.magic_cookie = bytes(msg[4:8])
        self.txn_id = bytes(msg[8:20])

        # Make sure message len accurately reflects size.
        end = STUN_HDR_LEN + self.msg_len
        if end > msg_len:
            raise ErrorSTUNDecode("Invalid length for STUN msg.")

        # Process serialized attribute chunk using pointers.
        self.attrs = []
        cursor = STUN_HDR_LEN
        while cursor < end:
            if cursor + STUN_ATTR_HDR_LEN > end:
                raise ErrorSTUNDecode("STUN attribute header truncated.")

            attr_type = msg[cursor:cursor + 2]
            attr_len = b_to_i(msg[cursor + 2:cursor + 4], 'big')
            cursor += STUN_ATTR_HDR_LEN

            # Value and its padding must both fit in the body.
            padded_len = attr_len + stun_pad_len(attr_len)
            if cursor + padded_len > end:
                raise ErrorSTUNDecode("STUN attribute len invalid.")

            self.attrs.append(
                STUNAttr(attr_type, msg[cursor:cursor + attr_len])
            )
            cursor += padded_len

        # ret data left in buffer, usually NULL
        return msg[end:]

    @staticmethod
    def unpack(msg):
        inst = STUNMsg()
        buf = inst.decode(msg)
        return inst, buf

    def __repr__(self):
        return "STUNMsg({}, {}, {})".format(
            STUNMsgTypes.get(self.msg_type) or to_h(self.msg_type),
            STUNMsgCodes.get(self.msg_code) or to_h(self.msg_code),
            self.attrs
        )
