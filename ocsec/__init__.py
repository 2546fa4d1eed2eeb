"""ocsec — host security posture center."""

__version__ = "0.1.0"
