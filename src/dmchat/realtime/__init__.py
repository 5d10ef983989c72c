"""Realtime delivery: connection membership, presence and message events."""
