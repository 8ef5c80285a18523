"""Receipt / payment voucher issuance: rendering, storage and public verification."""

__version__ = "1.0.0"
