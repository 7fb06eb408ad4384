"""hivestore: column-family storage plugin for device message streams.

Verifies the storage schema on startup, provisions table groups and
persists inbound commands, command updates and notifications.
"""

__version__ = "0.1.0"
