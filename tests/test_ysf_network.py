from collections import deque

import pytest

from ysflink.ysf_network import LinkStatus, YsfNetwork

REMOTE = ("192.0.2.1", 42000)
OTHER = ("192.0.2.9", 42000)


class FakeSocket:
    def __init__(self):
        self.sent = []
        self.incoming = deque()
        self.closed = False

    def sendto(self, data, address):
        self.sent.append((bytes(data), address))

    def recvfrom(self, length):
        if not self.incoming:
            raise BlockingIOError
        return self.incoming.popleft()

    def close(self):
        self.closed = True


def make(static=True):
    sock = FakeSocket()
    net = YsfNetwork(42000, "Alpha", REMOTE, "G0ABC", static=static, sock=sock)
    return net, sock


def linked():
    net, sock = make()
    net.open()
    net.link()
    sock.incoming.append((b"YSFP" + b"REFLECTOR ", REMOTE))
    net.clock(10)
    return net, sock


def test_open_without_address_raises():
    net = YsfNetwork(42000, "Alpha", None, "G0ABC", sock=FakeSocket())
    with pytest.raises(OSError):
        net.open()
    assert net.status is LinkStatus.NOT_OPEN


def test_open_then_link_sends_poll():
    net, sock = make()
    net.open()
    assert net.status is LinkStatus.NOT_LINKED
    net.link()
    assert net.status is LinkStatus.LINKING
    assert sock.sent == [(b"YSFP" + b"G0ABC     ", REMOTE)]


def test_poll_reply_links():
    net, _ = linked()
    assert net.status is LinkStatus.LINKED


def test_packets_from_other_address_ignored():
    net, sock = make()
    net.open()
    net.link()
    sock.incoming.append((b"YSFP" + b"REFLECTOR ", OTHER))
    net.clock(10)
    assert net.status is LinkStatus.LINKING


def test_write_only_when_linked():
    net, sock = make()
    net.open()
    frame = bytes(range(155))
    net.write(0, frame)
    assert sock.sent == []
    net, sock = linked()
    net.write(0, frame)
    assert sock.sent[-1] == (frame, REMOTE)


def test_write_short_frame_rejected():
    net, _ = linked()
    with pytest.raises(ValueError):
        net.write(0, b"YSFD")


def test_data_is_queued_and_read_back():
    net, sock = linked()
    packet = b"YSFD" + bytes(range(151))
    sock.incoming.append((packet, REMOTE))
    net.clock(10)
    assert net.read(0) == packet
    assert net.read(0) is None


def test_send_poll_timer_repeats_poll():
    net, sock = linked()
    count = len(sock.sent)
    net.clock(5000)
    assert len(sock.sent) == count + 1
    assert sock.sent[-1][0][:4] == b"YSFP"


def test_lost_link_static_goes_back_to_linking():
    net, _ = linked()
    net.clock(60000)
    assert net.status is LinkStatus.LINKING


def test_lost_link_dynamic_unlinks():
    sock = FakeSocket()
    net = YsfNetwork(42000, "Alpha", REMOTE, "G0ABC", static=False, sock=sock)
    net.open()
    net.link()
    net.clock(60000)
    assert net.status is LinkStatus.NOT_LINKED


def test_unlink_sends_unlink_packet():
    net, sock = linked()
    net.unlink()
    assert sock.sent[-1] == (b"YSFU" + b"G0ABC     ", REMOTE)
    assert net.status is LinkStatus.NOT_LINKED


def test_close_and_description():
    net, sock = linked()
    assert net.description(5) == "YSF: Alpha"
    assert net.dgid == 0
    net.close()
    assert sock.closed is True
    assert net.status is LinkStatus.NOT_OPEN