# src/eventmatch/api/__init__.py
"""HTTP and websocket API of the event matching service."""
