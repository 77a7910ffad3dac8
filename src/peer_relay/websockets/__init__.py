"""
WebSocket transport for the Peer Relay system.

Contains the relay server that drives the relay core and a matching client.
"""
