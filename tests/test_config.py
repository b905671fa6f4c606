import pytest

from ysflink.config import Config, load_config, parse_config


def test_defaults_from_empty_input():
    config = parse_config([])
    assert config == Config()
    assert config.wires_x_make_upper is True
    assert config.log_file_rotate is True
    assert config.remote_commands_port == 6073
    assert config.ysf_network_parrot_address == "127.0.0.1"
    assert config.ysf_network_ysf_direct_address == "127.0.0.1"


def test_general_section_values():
    config = parse_config([
        "[General]\n",
        "Callsign=n0call\n",
        "Suffix=rpt\n",
        "Id=1234567\n",
        "RptAddress=127.0.0.1\n",
        "RptPort=3200\n",
        "LocalAddress=127.0.0.1\n",
        "LocalPort=4200\n",
        "WiresXMakeUpper=0\n",
        "WiresXCommandPassthrough=1\n",
        "Debug=1\n",
        "Daemon=1\n",
    ])
    assert config.callsign == "N0CALL"
    assert config.suffix == "RPT"
    assert config.id == 1234567
    assert config.rpt_address == "127.0.0.1"
    assert config.rpt_port == 3200
    assert config.my_port == 4200
    assert config.wires_x_make_upper is False
    assert config.wires_x_command_passthrough is True
    assert config.debug is True
    assert config.daemon is True


def test_info_section_numbers():
    config = parse_config([
        "[Info]\n",
        "RXFrequency=430475000\n",
        "TXFrequency=439475000\n",
        "Power=5\n",
        "Latitude=51.5\n",
        "Longitude=-1.25\n",
        "Height=-10\n",
        "Name=Somewhere\n",
        "Description=Test site\n",
    ])
    assert config.rx_frequency == 430475000
    assert config.tx_frequency == 439475000
    assert config.power == 5
    assert config.latitude == pytest.approx(51.5)
    assert config.longitude == pytest.approx(-1.25)
    assert config.height == -10
    assert config.name == "Somewhere"
    assert config.description == "Test site"


def test_same_key_in_different_sections():
    config = parse_config([
        "[APRS]\n",
        "Port=8673\n",
        "[YSF Network]\n",
        "Port=42000\n",
        "[FCS Network]\n",
        "Port=42001\n",
        "[GPSD]\n",
        "Port=2947\n",
        "[Remote Commands]\n",
        "Port=6075\n",
    ])
    assert config.aprs_port == 8673
    assert config.ysf_network_port == 42000
    assert config.fcs_network_port == 42001
    assert config.gpsd_port == "2947"
    assert config.remote_commands_port == 6075


def test_quoted_value_keeps_hash_and_spaces():
    config = parse_config(['[Info]\n', 'Description="Club # 1  "\n'])
    assert config.description == "Club # 1  "


def test_unquoted_value_drops_comment_and_trailing_blanks():
    config = parse_config(["[Info]\n", "Name=Hilltop \t# a comment\n"])
    assert config.name == "Hilltop"


def test_comment_lines_are_skipped():
    config = parse_config(["[General]\n", "#Callsign=N0CALL\n", "Callsign=x1abc\n"])
    assert config.callsign == "X1ABC"


def test_unknown_section_ignores_keys():
    config = parse_config(["[Other]\n", "Callsign=N0CALL\n", "Debug=1\n"])
    assert config == Config()


def test_keys_before_any_section_are_ignored():
    config = parse_config(["Callsign=N0CALL\n"])
    assert config.callsign == ""


def test_section_header_matches_by_prefix():
    config = parse_config(["[General] trailing\n", "Debug=1\n"])
    assert config.debug is True


def test_debug_key_goes_to_the_current_section():
    config = parse_config(["[Network]\n", "Debug=1\n"])
    assert config.network_debug is True
    assert config.debug is False


def test_flag_is_only_true_for_one():
    config = parse_config(["[APRS]\n", "Enable=2\n"])
    assert config.aprs_enabled is False


def test_port_wraps_to_sixteen_bits():
    config = parse_config(["[General]\n", "RptPort=65537\n"])
    assert config.rpt_port == 1


def test_non_numeric_value_reads_as_zero():
    config = parse_config(["[Info]\n", "Power=lots\n"])
    assert config.power == 0


def test_key_without_value_is_skipped():
    config = parse_config(["[General]\n", "Callsign=\n"])
    assert config.callsign == ""


def test_ysf_network_addresses_override_defaults():
    config = parse_config([
        "[YSF Network]\n",
        "Enable=1\n",
        "Hosts=./YSFHosts.txt\n",
        "ReloadTime=60\n",
        "ParrotAddress=192.0.2.1\n",
        "ParrotPort=42012\n",
        "YSF2DMRAddress=192.0.2.2\n",
        "YSF2DMRPort=42013\n",
    ])
    assert config.ysf_network_enabled is True
    assert config.ysf_network_hosts == "./YSFHosts.txt"
    assert config.ysf_network_reload_time == 60
    assert config.ysf_network_parrot_address == "192.0.2.1"
    assert config.ysf_network_parrot_port == 42012
    assert config.ysf_network_ysf2dmr_address == "192.0.2.2"
    assert config.ysf_network_ysf2nxdn_address == "127.0.0.1"


def test_load_config_reads_file(tmp_path):
    path = tmp_path / "gateway.ini"
    path.write_text(
        "[General]\nCallsign=n0call\n\n[Log]\nFilePath=/tmp\nFileRotate=0\n"
        "DisplayLevel=1\nFileLevel=2\nFileRoot=Gateway\n",
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.callsign == "N0CALL"
    assert config.log_file_path == "/tmp"
    assert config.log_file_rotate is False
    assert config.log_display_level == 1
    assert config.log_file_level == 2
    assert config.log_file_root == "Gateway"


def test_load_config_matches_parse_config(tmp_path):
    text = "[Network]\nStartup=FCS00100\nOptions=opt\nInactivityTimeout=10\nRevert=1\n"
    path = tmp_path / "gateway.ini"
    path.write_text(text, encoding="utf-8")
    assert load_config(path) == parse_config(text.splitlines(keepends=True))


def test_load_config_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        load_config(tmp_path / "missing.ini")