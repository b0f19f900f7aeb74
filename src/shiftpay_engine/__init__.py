"""ShiftPay engine: shift pay calculation and tracker hour derivation."""

__version__ = "1.0.0"
