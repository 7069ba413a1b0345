"""Guardian and mint modules of a proof-of-stake ledger over an in-memory store."""

__version__ = "0.1.0"