from stunsniff import *

# RFC 5769 2.2 - IPv4 binding response, 192.0.2.1:32853.
RFC5769_V4_RESPONSE = bytes.fromhex(
    "0101003c"
    "2112a442"
    "b7e7a701bc34d686fa87dfae"
    "8022000b" "7465737420766563746f7220"
    "00200008" "0001a147e112a643"
    "00080014" "2b91f599fd9e90c38c7489f92af9ba53f06be7d7"
    "80280004" "c07d4c96"
)

RFC5769_V4_XOR_VALUE = bytes.fromhex("0001a147e112a643")
RFC5769_V4_TUP = ("192.0.2.1", 32853)

# Masked value used as the decode fixture.
MASKED_PEER_VALUE = bytes.fromhex("00011091a89a20d2")
MASKED_PEER_TUP = ("137.136.132.144", 12675)

def peer_msg(ip, port, msg_type=STUNMsgTypes.CreatePermission, msg_code=STUNMsgCodes.Request):
    msg = STUNMsg(msg_type, msg_code)
    msg.write_attr(STUNAttrs.XorPeerAddress, STUNAddrTup(ip, port))
    return msg.pack()

class FakeLauncher():
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, peer_host, peer_port, local_host, local_port, tool):
        self.calls.append((peer_host, peer_port, local_host, local_port, tool))
        if self.error is not None:
            raise self.error
