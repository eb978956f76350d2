"""Parish Ledger: church office API with a monthly family subscription ledger."""

__version__ = "0.1.0"
