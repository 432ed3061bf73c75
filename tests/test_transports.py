import asyncio

import pytest

from nameserver_sort import transports
from nameserver_sort.errors import ProbeError
from nameserver_sort.models import Transport, TransportProfile
from nameserver_sort.transports import (
    PingTransport,
    TCPTransport,
    build_ping_command,
    create_transport,
    parse_ping_output,
)


IPV4_PROFILE = TransportProfile(Transport.IPV4_HOSTNAME, timeout_seconds=1, min_reply_count=10)
IPV6_PROFILE = TransportProfile(Transport.IPV6)

LINUX_OUTPUT = """PING 1.1.1.1 (1.1.1.1) 56(84) bytes of data.
64 bytes from 1.1.1.1: icmp_seq=1 ttl=57 time=11.2 ms
64 bytes from 1.1.1.1: icmp_seq=2 ttl=57 time=12.9 ms

--- 1.1.1.1 ping statistics ---
2 packets transmitted, 2 received, 0% packet loss, time 1001ms
rtt min/avg/max/mdev = 11.200/12.050/12.900/0.850 ms
"""

MACOS_OUTPUT = """PING 8.8.8.8 (8.8.8.8): 56 data bytes
64 bytes from 8.8.8.8: icmp_seq=0 ttl=117 time=20.101 ms

--- 8.8.8.8 ping statistics ---
3 packets transmitted, 3 packets received, 0.0% packet loss
round-trip min/avg/max/stddev = 19.874/20.337/21.036/0.501 ms
"""

WINDOWS_OUTPUT = """Pinging 9.9.9.9 with 32 bytes of data:
Reply from 9.9.9.9: bytes=32 time=14ms TTL=58

Ping statistics for 9.9.9.9:
    Packets: Sent = 4, Received = 4, Lost = 0 (0% loss),
Approximate round trip times in milli-seconds:
    Minimum = 13ms, Maximum = 16ms, Average = 14ms
"""

LOSS_OUTPUT = """PING 192.0.2.1 (192.0.2.1) 56(84) bytes of data.

--- 192.0.2.1 ping statistics ---
10 packets transmitted, 0 received, 100% packet loss, time 9213ms
"""


class TestParsePingOutput:
    """Summary parsing for each ping dialect"""

    def test_linux(self):
        assert parse_ping_output(LINUX_OUTPUT) == (2, 12.05)

    def test_macos(self):
        assert parse_ping_output(MACOS_OUTPUT) == (3, 20.337)

    def test_windows(self):
        assert parse_ping_output(WINDOWS_OUTPUT) == (4, 14.0)

    def test_total_loss(self):
        assert parse_ping_output(LOSS_OUTPUT) == (0, None)

    def test_garbage(self):
        assert parse_ping_output("ping: unknown host nope.invalid") == (0, None)


class TestBuildPingCommand:
    """Argument dialects"""

    def test_linux_ipv4(self):
        command = build_ping_command("/bin/ping", "1.1.1.1", IPV4_PROFILE, "linux")
        assert command == ["/bin/ping", "-n", "-c", "10", "-W", "1", "1.1.1.1"]

    def test_linux_fractional_timeout_rounds_up(self):
        profile = TransportProfile(Transport.IPV4_HOSTNAME, timeout_seconds=0.3, min_reply_count=2)
        command = build_ping_command("/bin/ping", "1.1.1.1", profile, "linux")
        assert command == ["/bin/ping", "-n", "-c", "2", "-W", "1", "1.1.1.1"]

    def test_linux_ipv6_has_no_timeout(self):
        command = build_ping_command("/bin/ping", "2620:fe::fe", IPV6_PROFILE, "linux")
        assert command == ["/bin/ping", "-n", "-c", "1", "-6", "2620:fe::fe"]

    def test_macos_timeout_in_milliseconds(self):
        command = build_ping_command("/sbin/ping", "1.1.1.1", IPV4_PROFILE, "macos")
        assert command == ["/sbin/ping", "-n", "-c", "10", "-W", "1000", "1.1.1.1"]

    def test_windows(self):
        command = build_ping_command("ping.exe", "1.1.1.1", IPV4_PROFILE, "windows")
        assert command == ["ping.exe", "-n", "10", "-w", "1000", "1.1.1.1"]

    def test_windows_ipv6(self):
        command = build_ping_command("ping.exe", "::1", IPV6_PROFILE, "windows")
        assert command == ["ping.exe", "-n", "1", "-6", "::1"]


class FakeProcess:
    def __init__(self, stdout=b"", hang=False):
        self.stdout = stdout
        self.hang = hang
        self.killed = False

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(3600)
        return self.stdout, b""

    def kill(self):
        self.killed = True

    async def wait(self):
        return -9


@pytest.fixture
def fake_ping(monkeypatch):
    launched = []

    def install(process):
        async def create_subprocess_exec(*args, **kwargs):
            launched.append(list(args))
            return process

        monkeypatch.setattr(transports, "find_ping_binary", lambda ipv6=False: "/bin/ping")
        monkeypatch.setattr(transports.asyncio, "create_subprocess_exec", create_subprocess_exec)
        return launched

    return install


class TestPingTransport:
    """Subprocess handling with a faked ping process"""

    def test_returns_average(self, fake_ping):
        launched = fake_ping(FakeProcess(LINUX_OUTPUT.encode()))
        profile = TransportProfile(Transport.IPV4_HOSTNAME, timeout_seconds=1, min_reply_count=2)

        average = asyncio.run(PingTransport(system="linux").probe("1.1.1.1", profile))

        assert average == 12.05
        assert launched == [["/bin/ping", "-n", "-c", "2", "-W", "1", "1.1.1.1"]]

    def test_too_few_replies_fail(self, fake_ping):
        fake_ping(FakeProcess(LINUX_OUTPUT.encode()))

        with pytest.raises(ProbeError) as excinfo:
            asyncio.run(PingTransport(system="linux").probe("1.1.1.1", IPV4_PROFILE))

        assert "2/10" in str(excinfo.value)

    def test_total_loss_fails(self, fake_ping):
        fake_ping(FakeProcess(LOSS_OUTPUT.encode()))

        with pytest.raises(ProbeError):
            asyncio.run(PingTransport(system="linux").probe("192.0.2.1", IPV4_PROFILE))

    def test_hung_process_is_killed(self, fake_ping, monkeypatch):
        process = FakeProcess(hang=True)
        fake_ping(process)
        transport = PingTransport(system="linux")
        monkeypatch.setattr(transport, "process_deadline", lambda profile: 0.05)

        with pytest.raises(ProbeError):
            asyncio.run(transport.probe("192.0.2.1", IPV4_PROFILE))

        assert process.killed

    def test_missing_binary(self, monkeypatch):
        monkeypatch.setattr(transports, "find_ping_binary", lambda ipv6=False: None)

        with pytest.raises(ProbeError):
            asyncio.run(PingTransport(system="linux").probe("1.1.1.1", IPV4_PROFILE))

    def test_process_deadline(self):
        transport = PingTransport(system="linux")

        assert transport.process_deadline(IPV6_PROFILE) is None
        assert transport.process_deadline(IPV4_PROFILE) == 10 * 1.0 + transports.PROCESS_GRACE_SECONDS


def test_tcp_transport_measures_connect_time():
    async def scenario():
        async def handle(reader, writer):
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            profile = TransportProfile(Transport.IPV4_HOSTNAME, timeout_seconds=2, min_reply_count=3)
            return await TCPTransport(port=port).probe("127.0.0.1", profile)
        finally:
            server.close()
            await server.wait_closed()

    average = asyncio.run(scenario())

    assert average >= 0


def test_tcp_transport_refused_connect_fails():
    async def scenario():
        server = await asyncio.start_server(lambda reader, writer: None, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        server.close()
        await server.wait_closed()

        profile = TransportProfile(Transport.IPV4_HOSTNAME, timeout_seconds=1, min_reply_count=1)
        return await TCPTransport(port=port).probe("127.0.0.1", profile)

    with pytest.raises(ProbeError):
        asyncio.run(scenario())


def test_create_transport():
    assert isinstance(create_transport("ping"), PingTransport)
    assert isinstance(create_transport("tcp"), TCPTransport)

    with pytest.raises(ValueError):
        create_transport("carrier-pigeon")
