import socket

import pytest

from ysflink.aprs import AprsWriter


class FakeSocket:
    def __init__(self):
        self.sent = []
        self.closed = False

    def sendto(self, data, address):
        self.sent.append((data, address))

    def close(self):
        self.closed = True


ADDRESS = ("127.0.0.1", 8673)


def make_writer(callsign="GB7XX", rpt_suffix="R", suffix="", sock=None):
    return AprsWriter(
        callsign, rpt_suffix, "aprs.example.com", 8673, suffix,
        resolver=lambda host, port: ADDRESS, sock=sock if sock is not None else FakeSocket(),
    )


def test_position_report_worked_example():
    writer = make_writer()
    report = writer.position_report(b"G4KLX     ", "FT-1D", 0x24, 51.5, -0.25)
    assert report == "G4KLX>APDPRS,C4FM*,qAR,GB7XX-R:!5130.00N/00015.00W[ FT-1D via MMDVM\r\n"


def test_position_report_suffix_and_callsign_cut():
    writer = make_writer(suffix="Yes")
    report = writer.position_report(b"G4KLX/P   ", "FT-2D", 0x28, 1.0, 1.0)
    assert report.startswith("G4KLX-Y>APDPRS,C4FM*,qAR,GB7XX-R:!")


@pytest.mark.parametrize(
    "radio, symbol",
    [(0x24, "["), (0x33, "["), (0x25, ">"), (0x31, ">"), (0x20, "r"), (0x26, "r"), (0x99, "-")],
)
def test_position_report_radio_symbol(radio, symbol):
    writer = make_writer()
    report = writer.position_report(b"G4KLX     ", "X", radio, 10.0, 10.0)
    assert report.split(" ")[0][-1] == symbol


def test_position_report_hemispheres():
    writer = make_writer()
    north_east = writer.position_report(b"G4KLX     ", "X", 0x24, 20.0, 30.0)
    south_west = writer.position_report(b"G4KLX     ", "X", 0x24, -20.0, -30.0)
    assert north_east.replace("N/", "S/").replace("E[", "W[") == south_west


def test_id_frame_none_without_location():
    writer = make_writer()
    assert writer.id_frame() is None


def test_id_frame_worked_example():
    writer = make_writer()
    writer.set_static_location(51.5, -0.25, 0)
    assert writer.id_frame() == (
        "GB7XX-R>APDG03,TCPIP*,qAC,GB7XX-RS:!5130.00ND00015.00W&/A=0000004m MMDVM Voice (C4FM)\r\n"
    )


def test_id_frame_server_without_dash_and_custom_symbol():
    writer = make_writer(rpt_suffix="")
    writer.set_static_location(51.5, -0.25, 0)
    writer.set_info(0, 0, "", "R#")
    frame = writer.id_frame()
    assert ",qAC,GB7XX-S:!" in frame
    assert "5130.00NR00015.00W#" in frame


def test_id_frame_frequency_description():
    writer = make_writer()
    writer.set_static_location(51.5, -0.25, 0)
    writer.set_info(430000000, 438000000, "Test", "")
    frame = writer.id_frame()
    assert frame.endswith("70cm MMDVM Voice (C4FM) 430.00000MHz +8.0000MHz, Test\r\n")


def test_id_frame_negative_offset():
    writer = make_writer()
    writer.set_static_location(51.5, -0.25, 0)
    writer.set_info(438000000, 430000000, "", "")
    assert " -8.0000MHz" in writer.id_frame()


@pytest.mark.parametrize(
    "tx, band",
    [(1240000000, "23cm/1.2GHz"), (430000000, "70cm"), (145000000, "2m"),
     (50500000, "6m"), (29000000, "10m"), (0, "4m")],
)
def test_id_frame_band(tx, band):
    writer = make_writer()
    writer.set_static_location(51.5, -0.25, 0)
    writer.set_info(tx, tx, "", "")
    assert f"/A=000000{band} " in writer.id_frame()


def test_open_unresolved_raises():
    writer = AprsWriter("GB7XX", "", "nowhere", 8673, resolver=lambda h, p: None, sock=FakeSocket())
    with pytest.raises(OSError):
        writer.open()


def test_write_before_open_uses_given_socket():
    sock = FakeSocket()
    writer = make_writer(sock=sock)
    writer.open()
    writer.write(b"G4KLX     ", "FT-1D", 0x24, 51.5, -0.25)
    data, address = sock.sent[0]
    assert address == ADDRESS
    assert data.startswith(b"G4KLX>APDPRS") and data.endswith(b"\r\n")


def test_write_when_closed_raises():
    writer = make_writer()
    writer.open()
    writer.close()
    with pytest.raises(RuntimeError):
        writer.write(b"G4KLX     ", "FT-1D", 0x24, 1.0, 1.0)


def test_clock_sends_id_frames_on_schedule():
    sock = FakeSocket()
    writer = make_writer(sock=sock)
    writer.set_static_location(51.5, -0.25, 0)
    writer.open()
    writer.clock(59999)
    assert sock.sent == []
    writer.clock(1)
    assert len(sock.sent) == 1
    writer.clock(60000)
    assert len(sock.sent) == 1
    writer.clock(20 * 60 * 1000 - 60000)
    assert len(sock.sent) == 2


def test_clock_without_location_sends_nothing():
    sock = FakeSocket()
    writer = make_writer(sock=sock)
    writer.open()
    writer.clock(60000)
    assert sock.sent == []


def test_close_closes_socket():
    sock = FakeSocket()
    writer = make_writer(sock=sock)
    writer.open()
    writer.close()
    assert sock.closed is True


def test_real_udp_loopback():
    receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    receiver.bind(("127.0.0.1", 0))
    receiver.settimeout(2.0)
    port = receiver.getsockname()[1]
    try:
        writer = AprsWriter("GB7XX", "R", "127.0.0.1", port)
        writer.open()
        writer.write(b"G4KLX     ", "FT-1D", 0x24, 51.5, -0.25)
        data, _ = receiver.recvfrom(1024)
        writer.close()
    finally:
        receiver.close()
    assert data.decode("ascii") == writer.position_report(b"G4KLX     ", "FT-1D", 0x24, 51.5, -0.25)