"""ComfyUI workflow templates and node maps.

A node map names, for each generation parameter, the workflow node and input
that receives it, e.g. ``{"prompt": {"id": "6", "input": "text"}}``.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

NODE_MAP_KEYS = ("image", "prompt", "seed", "steps", "cfg", "width", "height")


class WorkflowError(Exception):
    """Workflow template or node map cannot be applied."""


def set_input_value(workflow: Dict[str, Any], entry: Dict[str, str], value: Any) -> None:
    """Set one node input in a workflow."""
    node = workflow.get(entry["id"])
    if not isinstance(node, dict) or not isinstance(node.get("inputs"), dict):
        raise WorkflowError(f"Node {entry['id']} not found in workflow.")
    node["inputs"][entry["input"]] = value


def apply_node_map(
    workflow: Dict[str, Any],
    node_map: Dict[str, Dict[str, str]],
    values: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Write parameter values into a workflow through a node map.

    Values that are None, or that have no node map entry, are skipped.

    Args:
        workflow: ComfyUI API-format workflow (modified in place)
        node_map: Parameter name -> ``{"id": node id, "input": input name}``
        values: Parameter name -> value

    Returns:
        The same workflow, for chaining
    """
    for key, value in values.items():
        entry = node_map.get(key)
        if not entry or value is None:
            continue
        set_input_value(workflow, entry, value)
    return workflow


class WorkflowStore:
    """Loads and caches the workflow template and node map from disk."""

    def __init__(self, workflow_path: str, node_map_path: str):
        self.workflow_path = Path(workflow_path)
        self.node_map_path = Path(node_map_path)
        self._workflow: Optional[Dict[str, Any]] = None
        self._node_map: Optional[Dict[str, Dict[str, str]]] = None

    @staticmethod
    def _load_json(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Workflow file not found: {path}")
            return {}
        except json.JSONDecodeError as e:
            raise WorkflowError(f"Failed to load {path.name}: {e}")
        return data if isinstance(data, dict) else {}

    def workflow_template(self) -> Dict[str, Any]:
        """Return a fresh copy of the workflow template."""
        if self._workflow is None:
            self._workflow = self._load_json(self.workflow_path)
        return copy.deepcopy(self._workflow)

    def node_map(self) -> Dict[str, Dict[str, str]]:
        """Return the node map (empty if unavailable)."""
        if self._node_map is None:
            self._node_map = self._load_json(self.node_map_path)
        return self._node_map
