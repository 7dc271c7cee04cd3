"""Envelope field layouts, metadata and the EIP-712 envelope."""
