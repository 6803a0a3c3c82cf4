import io
import logging
from stunsniff import *
from stunsniff.entry_point import main as sniff_main
try:
    from .test_daemon import UpstreamServer
except ImportError:
    from test_daemon import UpstreamServer


def parse_conf(argv, environ={}):
    args = build_parser().parse_args(argv)
    return args_to_conf(args, environ)

class TestEntryPoint(unittest.TestCase):
    def test_defaults(self):
        conf = parse_conf([])
        self.assertEqual(conf["remote_host"], "localhost")
        self.assertEqual(conf["remote_port"], 3478)
        self.assertEqual(conf["local_host"], "localhost")
        self.assertEqual(conf["local_port"], 6000)
        self.assertEqual(conf["tool"], "stundemux")
        self.assertEqual(conf["demux_host"], "127.0.0.1")
        self.assertEqual(conf["demux_port"], 6001)
        self.assertEqual(conf["buf_size"], 1024 * 1024)

    def test_flags(self):
        conf = parse_conf([
            "-H", "turn.example.com",
            "-P", "5349",
            "-h", "0.0.0.0",
            "-p", "7000",
            "-t", "/usr/local/bin/stundemux"
        ])
        self.assertEqual(conf["remote_host"], "turn.example.com")
        self.assertEqual(conf["remote_port"], 5349)
        self.assertEqual(conf["local_host"], "0.0.0.0")
        self.assertEqual(conf["local_port"], 7000)
        self.assertEqual(conf["tool"], "/usr/local/bin/stundemux")

    def test_env_overrides(self):
        environ = {
            "STUNSNIFF_REMOTE_PORT": "5000",
            "STUNSNIFF_TOOL": "otherdemux",
        }
        conf = parse_conf([], environ)
        self.assertEqual(conf["remote_port"], 5000)
        self.assertEqual(conf["tool"], "otherdemux")

        # Flags beat the environment.
        conf = parse_conf(["-P", "6001"], environ)
        self.assertEqual(conf["remote_port"], 6001)

    def test_bad_env_value(self):
        with self.assertRaises(ValueError):
            parse_conf([], {"STUNSNIFF_LOCAL_PORT": "lots"})

    def test_bad_port(self):
        with self.assertRaises(ValueError):
            parse_conf(["-P", "70000"])

        with self.assertRaises(ValueError):
            parse_conf(["-p", "-1"])

    def test_defaults_not_mutated(self):
        parse_conf(["-H", "elsewhere"])
        self.assertEqual(SNIFF_CONF["remote_host"], "localhost")

    def test_help_flag(self):
        with self.assertRaises(SystemExit) as cm:
            build_parser().parse_args(["--help"])
        self.assertEqual(cm.exception.code, 0)

    def test_main_bad_conf(self):
        logger = logging.getLogger("stunsniff")
        try:
            self.assertEqual(sniff_main(["-P", "0"]), 2)
        finally:
            logger.handlers = []
            logger.propagate = True

def free_port():
    sock = socket.socket(IP4, TCP)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port

async def connect_retry(host, port, timeout=5):
    loop = asyncio.get_running_loop()
    end = loop.time() + timeout
    while 1:
        try:
            return await asyncio.open_connection(host, port)
        except OSError:
            if loop.time() > end:
                raise
            await asyncio.sleep(0.05)

class TestMainRelay(unittest.IsolatedAsyncioTestCase):
    async def test_main_clean_eof_exits_zero(self):
        upstream = await UpstreamServer().start()
        port = free_port()
        argv = [
            "-H", "127.0.0.1",
            "-P", str(upstream.port),
            "-h", "127.0.0.1",
            "-p", str(port),
            "-t", "stundemux-not-installed"
        ]

        loop = asyncio.get_running_loop()
        logger = logging.getLogger("stunsniff")
        main_fut = loop.run_in_executor(None, sniff_main, argv)
        try:
            reader, writer = await connect_retry("127.0.0.1", port)
            writer.write(b"ping")
            await writer.drain()
            echoed = await asyncio.wait_for(reader.readexactly(4), 10)
            self.assertEqual(echoed, b"ping")

            # Client EOF ends the run with a clean status.
            writer.close()
            self.assertEqual(await asyncio.wait_for(main_fut, 10), 0)
            self.assertEqual(bytes(upstream.received), b"ping")
        finally:
            logger.handlers = []
            logger.propagate = True
            await upstream.close()

class TestLogging(unittest.TestCase):
    def test_setup_logging(self):
        out = io.StringIO()
        logger = setup_logging(logging.DEBUG, stream=out)
        try:
            log("> Peer address: 1.2.3.4:5")
            log_debug("> debug line")
        finally:
            logger.handlers = []
            logger.propagate = True

        lines = out.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertIn("> Peer address: 1.2.3.4:5", lines[0])
        self.assertIn("test_entry_point.py", lines[0])

if __name__ == '__main__':
    main()
