"""Concurrency primitives used by the connection engine."""

from .channel import ChannelClosed, ChannelFull, ReplyChannel

__all__ = [
    "ChannelClosed",
    "ChannelFull",
    "ReplyChannel",
]
