import asyncio
import subprocess
from .utils import *

"""
The demux tool is an opaque external program. It gets the
peer endpoint and the local UDP endpoint to bind as flags
and shares our stdout / stderr so its output shows up next
to the relay's. Nothing waits on it and its exit code is
only logged.
"""

# Strong refs so running launch tasks aren't garbage collected.
LAUNCH_TASKS = set()

def demux_tool_args(tool, peer_host, peer_port, local_host, local_port):
    return [
        tool,
        "-H", str(peer_host),
        "-P", str(peer_port),
        "-h", str(local_host),
        "-p", str(local_port),
    ]

async def run_demux_tool(peer_host, peer_port, local_host, local_port, tool):
    args = demux_tool_args(tool, peer_host, peer_port, local_host, local_port)
    log_debug("> Demux cmd = {}".format(args))

    # stdout / stderr = None means inherit ours.
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=None,
            stderr=None
        )
    except (OSError, NotImplementedError):
        log_exception()
        return None

    ret = await proc.wait()
    log_debug("> Demux tool {} exited = {}".format(tool, ret))
    return ret

def run_demux_tool_blocking(peer_host, peer_port, local_host, local_port, tool):
    args = demux_tool_args(tool, peer_host, peer_port, local_host, local_port)
    try:
        proc = subprocess.Popen(args, stdin=subprocess.DEVNULL)
    except OSError:
        log_exception()
        return None

    ret = proc.wait()
    log_debug("> Demux tool {} exited = {}".format(tool, ret))
    return ret

def launch_demux_tool(peer_host, peer_port, local_host, local_port, tool):
    """
    Fire and forget. Uses the running event loop if there is
    one, otherwise a daemon thread. Returns the task / thread.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop is None:
        return run_in_thread(
            run_demux_tool_blocking,
            peer_host,
            peer_port,
            local_host,
            local_port,
            tool
        )

    task = loop.create_task(
        async_wrap_errors(
            run_demux_tool(peer_host, peer_port, local_host, local_port, tool)
        )
    )
    LAUNCH_TASKS.add(task)
    task.add_done_callback(LAUNCH_TASKS.discard)
    return task
