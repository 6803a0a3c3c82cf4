import asyncio
import binascii
import copy
import logging
import os
import sys
import threading
import traceback

if sys.version_info < (3, 8):
    raise Exception("Python 3.8 or higher needed.")

LOG_FORMAT = '[%(asctime)s.%(msecs)03d] @ [%(filename)s:%(lineno)d] %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

logger = logging.getLogger("stunsniff")

if "STUNSNIFF_DEBUG" in os.environ:
    IS_DEBUG = 1
else:
    IS_DEBUG = 0

MAX_PORT = 65535

to_b = lambda x: x if type(x) == bytes else x.encode("ascii")
to_s = lambda x: x if type(x) == str else x.decode("ascii")
to_hs = lambda x: to_s(binascii.hexlify(to_b(x)))
to_h = lambda x: to_hs(x) if len(x) else "00"
b_to_i = lambda x, o='big': int.from_bytes(x, o)
valid_port = lambda p: p >= 1 and p <= MAX_PORT
b_and = lambda abytes, bbytes: bytes(map(lambda a,b: a & b, abytes, bbytes))
b_or = lambda abytes, bbytes: bytes(map(lambda a,b: a | b, abytes, bbytes))

# XOR two buffers together. Output is as long as the shortest.
xor_bufs = lambda abytes, bbytes: bytes(map(lambda a,b: a ^ b, abytes, bbytes))

def setup_logging(level=None, filename=None, stream=None):
    """
    Logs go to stdout like most CLI tools so that is the
    default here. STUNSNIFF_DEBUG turns on debug output
    and STUNSNIFF_LOG redirects everything to a file.
    """
    if level is None:
        level = logging.DEBUG if IS_DEBUG else logging.INFO

    if filename is None:
        filename = os.environ.get("STUNSNIFF_LOG")

    if filename:
        handler = logging.FileHandler(filename)
    else:
        handler = logging.StreamHandler(stream or sys.stdout)

    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger

def log(m, level=logging.INFO):
    # Keep the file and line of the caller in the record.
    logger.log(level, m, stacklevel=2)

def log_debug(m):
    logger.debug(m, stacklevel=2)

# Take a dict template called Y and a child dict called X.
# Yield a new dict with Y's vals overwritten by X's.
def dict_child(x, y):
    out = copy.deepcopy(y)
    for key in x:
        out[key] = x[key]
    #
    return out

def log_exception():
    exc_type, exc_obj, exc_tb = sys.exc_info()
    fname = os.path.split(exc_tb.tb_frame.f_code.co_filename)[1]
    exc_out = traceback.format_exc()
    log("> {}, line {} = {}".format(
        fname,
        exc_tb.tb_lineno,
        exc_out
    ), logging.ERROR)

async def async_wrap_errors(coro, timeout=None):
    try:
        # Don't bound wait time.
        if timeout is None:
            return (await coro)

        # Bound wait time.
        return (await asyncio.wait_for(coro, timeout))
    except asyncio.CancelledError:
        raise
    except Exception:
        # Log all errors.
        log_exception()

def sync_wrap_errors(f, args=[]):
    try:
        if len(args):
            return f(*args)
        else:
            return f()
    except Exception:
        # Log all errors.
        log_exception()

def run_in_thread(f, *args):
    # Daemon threads don't hold the process open on exit.
    t = threading.Thread(
        target=sync_wrap_errors,
        args=(f, args),
        daemon=True
    )
    t.start()
    return t
