"""Service configuration management."""

import os
from dataclasses import dataclass


@dataclass
class ServiceConfig:
    """External service configuration."""

    # RunPod render workers
    runpod_api_key: str = ""
    runpod_endpoint_url: str = ""
    runpod_worker_mode: str = ""

    # ComfyUI worker mode
    comfy_org_api_key: str = ""
    comfy_workflow_path: str = "data/comfy/workflow.json"
    comfy_node_map_path: str = "data/comfy/node_map.json"

    # OpenAI chat completions
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Supabase message store
    supabase_url: str = ""
    supabase_anon_key: str = ""

    # Client-side endpoints
    render_api_url: str = "http://localhost:8000/api/qwen"
    chat_api_url: str = "http://localhost:8000/api/chat"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Load configuration from environment variables."""
        return cls(
            # RunPod
            runpod_api_key=os.getenv("RUNPOD_API_KEY", ""),
            runpod_endpoint_url=os.getenv("RUNPOD_ENDPOINT_URL", ""),
            runpod_worker_mode=os.getenv("RUNPOD_WORKER_MODE", ""),

            # ComfyUI
            comfy_org_api_key=os.getenv("COMFY_ORG_API_KEY", ""),
            comfy_workflow_path=os.getenv("COMFY_WORKFLOW_PATH", "data/comfy/workflow.json"),
            comfy_node_map_path=os.getenv("COMFY_NODE_MAP_PATH", "data/comfy/node_map.json"),

            # OpenAI
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL") or "gpt-4o-mini",

            # Supabase
            supabase_url=os.getenv("SUPABASE_URL", ""),
            supabase_anon_key=os.getenv("SUPABASE_ANON_KEY", ""),

            # Client endpoints
            render_api_url=os.getenv("RENDER_API_URL", "http://localhost:8000/api/qwen"),
            chat_api_url=os.getenv("CHAT_API_URL", "http://localhost:8000/api/chat"),
        )

    @property
    def runpod_endpoint(self) -> str:
        """RunPod endpoint URL without a trailing slash."""
        return self.runpod_endpoint_url.rstrip("/")

    def is_runpod_configured(self) -> bool:
        """Check if RunPod is properly configured."""
        return bool(self.runpod_api_key and self.runpod_endpoint)

    def is_openai_configured(self) -> bool:
        """Check if OpenAI is properly configured."""
        return bool(self.openai_api_key)

    def is_supabase_configured(self) -> bool:
        """Check if the Supabase message store is configured."""
        return bool(self.supabase_url and self.supabase_anon_key)
