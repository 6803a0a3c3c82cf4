import argparse
import asyncio
from .errors import *
from .utils import *
from .settings import *
from .daemon import SniffDaemon

# Flag names follow the demux tool: upper case for the remote
# side and lower case for the local side. -h isn't help here
# so help moves to --help.
def build_parser():
    p = argparse.ArgumentParser(
        prog="stunsniff",
        description="TCP relay that launches a demux tool for the first TURN peer address seen.",
        add_help=False
    )
    p.add_argument("--help", action="help", help="show this help message and exit")
    p.add_argument("-H", dest="remote_host", default=None, help="remote server address")
    p.add_argument("-P", dest="remote_port", type=int, default=None, help="remote server port")
    p.add_argument("-h", dest="local_host", default=None, help="address to bind to")
    p.add_argument("-p", dest="local_port", type=int, default=None, help="local proxy port")
    p.add_argument("-t", dest="tool", default=None, help="tool to launch if peer address found")
    return p

def args_to_conf(args, environ=None):
    # Flags left unset fall back to env vars then defaults.
    overrides = {}
    for key in ["remote_host", "remote_port", "local_host", "local_port", "tool"]:
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value

    return load_conf(overrides, environ)

async def run_sniffer(conf):
    daemon = SniffDaemon(conf)
    try:
        return await daemon.serve_one()
    finally:
        await daemon.close()

def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        conf = args_to_conf(args)
    except ValueError as e:
        log("> Bad config = {}".format(e))
        return 2

    try:
        clean = asyncio.run(run_sniffer(conf))
    except KeyboardInterrupt:
        return 130
    except Exception:
        # Listen, accept and connect errors are all fatal.
        log_exception()
        return 1

    return 0 if clean else 1

if __name__ == "__main__": # pragma: no cover
    raise SystemExit(main())
