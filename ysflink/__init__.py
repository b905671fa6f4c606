"""System Fusion frame coding, reflector links, DTMF and GPS decoding, and APRS reporting."""

__version__ = "0.1.0"

__all__ = [
    "aprs",
    "config",
    "convolution",
    "crc",
    "dtmf",
    "fcs_network",
    "fich",
    "gps",
    "payload",
    "reflectors",
    "utils",
    "ysf_network",
]