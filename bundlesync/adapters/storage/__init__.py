"""Storage adapters — remote catalog implementations."""
