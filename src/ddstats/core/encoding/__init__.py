"""Encoders for backend payloads."""
