from .notification_emitter import NotificationEmitter, provider_display_name
from .publish_orchestrator import PassResult, PublishOrchestrator, final_status

__all__ = [
    "NotificationEmitter",
    "PassResult",
    "PublishOrchestrator",
    "final_status",
    "provider_display_name",
]
