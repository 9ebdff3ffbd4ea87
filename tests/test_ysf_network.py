import socket
import time

import pytest

from fusionlink.ysf_network import LinkStatus, YsfNetwork


@pytest.fixture
def peer():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2.0)
    yield sock
    sock.close()


def _make(peer, static=True):
    return YsfNetwork(0, "Test", peer.getsockname(), "G0ABC", static, False, "127.0.0.1")


@pytest.fixture
def network(peer):
    net = _make(peer)
    net.open()
    yield net
    net.close()


def _pump(network, condition):
    for _ in range(200):
        network.clock(0)
        if condition():
            return True
        time.sleep(0.005)
    return False


def _link(network, peer):
    network.link()
    _, addr = peer.recvfrom(200)
    peer.sendto(b"YSFPREFLECTOR ", addr)
    assert _pump(network, lambda: network.status() is LinkStatus.LINKED)
    return addr


def test_description_and_dgid(network):
    assert network.description(5) == "YSF: Test"
    assert network.dgid() == 0


def test_open_without_address_raises():
    net = YsfNetwork(0, "Test", None, "G0ABC")
    with pytest.raises(ConnectionError):
        net.open()
    assert net.status() is LinkStatus.NOT_OPEN


def test_open_sets_not_linked(network):
    assert network.status() is LinkStatus.NOT_LINKED


def test_link_sends_poll(network, peer):
    network.link()
    packet, _ = peer.recvfrom(200)
    assert packet == b"YSFP" + b"G0ABC     "
    assert network.status() is LinkStatus.LINKING


def test_poll_reply_links(network, peer):
    _link(network, peer)
    assert network.status() is LinkStatus.LINKED


def test_data_frames_read_in_order(network, peer):
    addr = _link(network, peer)
    first = b"YSFD" + bytes(151)
    second = b"YSFD" + bytes(range(151))
    peer.sendto(first, addr)
    peer.sendto(second, addr)
    received = []
    for _ in range(200):
        network.clock(0)
        packet = network.read(0)
        if packet is not None:
            received.append(packet)
        if len(received) == 2:
            break
        time.sleep(0.005)
    assert received == [first, second]


def test_read_empty_returns_none(network):
    assert network.read(0) is None


def test_write_ignored_when_not_linked(network, peer):
    network.write(0, bytes(155))
    peer.settimeout(0.2)
    with pytest.raises(socket.timeout):
        peer.recvfrom(200)
    assert network.status() is LinkStatus.NOT_LINKED


def test_write_when_linked(network, peer):
    _link(network, peer)
    frame = b"YSFD" + bytes(range(151))
    network.write(0, frame)
    packet, _ = peer.recvfrom(200)
    assert packet == frame


def test_write_short_frame_raises(network, peer):
    _link(network, peer)
    with pytest.raises(ValueError):
        network.write(0, bytes(10))


def test_unlink_sends_unlink(network, peer):
    _link(network, peer)
    network.unlink()
    packet, _ = peer.recvfrom(200)
    assert packet == b"YSFU" + b"G0ABC     "
    assert network.status() is LinkStatus.NOT_LINKED


def test_lost_link_static_relinks(network, peer):
    _link(network, peer)
    network.clock(60000)
    assert network.status() is LinkStatus.LINKING


def test_lost_link_dynamic_unlinks(peer):
    net = _make(peer, static=False)
    net.open()
    try:
        _link(net, peer)
        net.clock(60000)
        assert net.status() is LinkStatus.NOT_LINKED
    finally:
        net.close()


def test_packets_from_other_address_ignored(network, peer):
    network.link()
    _, addr = peer.recvfrom(200)
    other = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        other.bind(("127.0.0.1", 0))
        other.sendto(b"YSFPREFLECTOR ", addr)
        other.sendto(b"YSFD" + bytes(151), addr)
        for _ in range(20):
            network.clock(0)
            time.sleep(0.005)
    finally:
        other.close()
    assert network.status() is LinkStatus.LINKING
    assert network.read(0) is None


def test_close_sets_not_open(network):
    network.close()
    assert network.status() is LinkStatus.NOT_OPEN