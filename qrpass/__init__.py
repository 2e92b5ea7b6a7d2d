"""Signed QR pass issuance and verification service."""

__version__ = "1.0.0"
