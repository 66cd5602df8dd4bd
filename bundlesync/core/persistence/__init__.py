"""Persistence — receipts and the run ledger."""
