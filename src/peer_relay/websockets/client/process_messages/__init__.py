"""
Message processing modules for the relay client.
"""

from .control_message import ControlMessageHandler

__all__ = [
    "ControlMessageHandler",
]
