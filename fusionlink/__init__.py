"""Yaesu System Fusion (YSF) payload coding, FICH fields, DTMF, GPS, APRS and reflector links."""

__version__ = "0.1.0"