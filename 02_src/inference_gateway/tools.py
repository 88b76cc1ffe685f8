"""
Tool manifest and system instruction for the orchestrator persona.

Declares the four capabilities the backend may ask the caller to invoke.
"""
from typing import Sequence, Tuple

from .models import Route, ToolDeclaration


DEFAULT_HUB_IDS = ("DEV", "DATA", "AI", "OPS", "GROWTH", "COMMERCE", "COLLAB")

SIMULATION_EVENT_TYPES = ("FAIL_DISTRICT", "SWITCH_TRANSIT", "RESET")


TOOL_MANIFEST: Tuple[ToolDeclaration, ...] = (
    ToolDeclaration(
        name="navigateToSection",
        description="Navigates the user interface to a specific architectural district.",
        parameters={
            "type": "object",
            "properties": {
                "sectionId": {"type": "string"},
            },
            "required": ["sectionId"],
        },
    ),
    ToolDeclaration(
        name="triggerSimulationEvent",
        description="Executes a failure simulation or connectivity test.",
        parameters={
            "type": "object",
            "properties": {
                "eventType": {"type": "string", "enum": list(SIMULATION_EVENT_TYPES)},
                "targetId": {"type": "string"},
            },
            "required": ["eventType"],
        },
    ),
    ToolDeclaration(
        name="toggleGPU",
        description="Activates or scales back the H100 GPU acceleration cluster.",
        parameters={
            "type": "object",
            "properties": {
                "active": {"type": "boolean"},
            },
            "required": ["active"],
        },
    ),
    ToolDeclaration(
        name="createMaintenanceTask",
        description="Adds a maintenance task to the persistent system backlog.",
        parameters={
            "type": "object",
            "properties": {
                "text": {
                    "type": "string",
                    "description": "The description of the maintenance task.",
                },
            },
            "required": ["text"],
        },
    ),
)


def build_system_instruction(
    route: Route,
    throughput: float,
    hub_ids: Sequence[str] = DEFAULT_HUB_IDS,
) -> str:
    """
    Build the system instruction for a route.

    Args:
        route: Selected Route
        throughput: Cluster capacity in TFLOPS
        hub_ids: Federated hubs managed by the orchestrator

    Returns:
        System instruction text
    """
    return f"""
You are the FlashFusion Orchestrator, running on the {route.label} node.
Provider: {route.provider}.
Cluster Capacity: {throughput:.1f} TFLOPS (H100 Tensor Core).

MISSION:
- Manage the federated architecture comprising: {', '.join(hub_ids)}.
- Route intelligence between domains.
- Maintain the persona of a high-end systems architect.

CAPABILITIES:
1. 'navigateToSection': Move viewport to sectors.
2. 'triggerSimulationEvent': Chaos engineering protocols.
3. 'toggleGPU': Scale inference cluster.
4. 'createMaintenanceTask': Add a persistent task to the system backlog for maintenance.
"""
