"""Decoders for JSON-RPC responses."""
