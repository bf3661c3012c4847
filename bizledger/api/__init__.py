"""HTTP API for Bizledger."""
