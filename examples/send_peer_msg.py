"""
Manual check for a running sniffer:

    stunsniff -H <turn server> -t ./fake_demux.sh &
    python examples/send_peer_msg.py 127.0.0.1 6000 203.0.113.9 40000

Sends a TURN CreatePermission carrying an XOR-PEER-ADDRESS
through the relay twice on one connection. The sniffer should
log the peer address and launch its demux tool only once. It
takes a single client, so run this once per sniffer.
"""

import sys
from stunsniff import *

async def send_peer_msg(host, port, peer_ip, peer_port, count=2):
    reader, writer = await asyncio.open_connection(host, port)
    msg = STUNMsg(STUNMsgTypes.CreatePermission)
    msg.write_attr(STUNAttrs.XorPeerAddress, STUNAddrTup(peer_ip, peer_port))
    buf = msg.pack()
    for _ in range(count):
        writer.write(buf)
        await writer.drain()

    # Whatever the server replies with.
    try:
        reply = await asyncio.wait_for(reader.read(4096), 2)
        print(search_stun_peer(reply) or reply)
    except asyncio.TimeoutError:
        print("no reply")

    writer.close()

if __name__ == "__main__":
    host, port, peer_ip, peer_port = sys.argv[1:5]
    asyncio.run(send_peer_msg(host, int(port), peer_ip, int(peer_port)))
