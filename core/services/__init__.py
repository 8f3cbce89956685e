"""External service integration for Persona Studio."""

from .config import ServiceConfig
from .openai_service import OpenAIChatService
from .runpod_service import ProxyError, RunPodService, UpstreamReply
from .workflow import WorkflowError, WorkflowStore, apply_node_map

__all__ = [
    "ServiceConfig",
    "OpenAIChatService",
    "RunPodService",
    "ProxyError",
    "UpstreamReply",
    "WorkflowStore",
    "WorkflowError",
    "apply_node_map",
]
