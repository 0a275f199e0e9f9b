"""Protocols and the reduction executors used by the backward pass."""
