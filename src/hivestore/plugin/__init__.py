"""Storage plugin: readiness verification, provisioning and dispatch.

- Verifier: bounded schema polling, then provisioning
- Dispatcher: message classification and routing to backend writes
- Service: the lifecycle a message host drives
- Manager / hookspecs: pluggy-based storage backend registration
"""

from hivestore.plugin.dispatcher import MessageDispatcher
from hivestore.plugin.hookspecs import hookimpl, hookspec
from hivestore.plugin.manager import BackendManager
from hivestore.plugin.service import StoragePluginService
from hivestore.plugin.verifier import ReadinessVerifier, provision

__all__ = [
    "BackendManager",
    "MessageDispatcher",
    "ReadinessVerifier",
    "StoragePluginService",
    "hookimpl",
    "hookspec",
    "provision",
]
