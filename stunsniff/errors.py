# Defines all custon exceptions.

# Buffer isn't a structurally valid STUN message.
class ErrorSTUNDecode(Exception):
    pass

# XOR-PEER-ADDRESS value too short to hold a port and IPv4 address.
class ErrorPeerAddress(ErrorSTUNDecode):
    pass

# Couldn't open the outbound connection to the remote server.
class ErrorRelay(Exception):
    pass

# Couldn't bind or listen on the local endpoint.
class ErrorListen(Exception):
    pass
