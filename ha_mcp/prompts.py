"""
Home Assistant MCP Server - Prompts

Guided workflows a client can offer to the user. Each prompt renders a
single user message that tells the assistant which tools to use.
"""

from __future__ import annotations

from typing import Callable, Optional

import mcp.types as types

from ha_mcp.content import create_text_content
from ha_mcp.logging_config import get_logger


logger = get_logger("prompts")

PROMPTS = [
    types.Prompt(
        name="troubleshoot_entity",
        title="Troubleshoot Entity",
        description="Guided troubleshooting for a problematic entity. Analyzes state, history, and related entities to identify issues.",
        arguments=[
            types.PromptArgument(name="entity_id", description="The entity ID that's having problems", required=True),
            types.PromptArgument(name="problem_description", description="Brief description of the problem", required=False),
        ],
    ),
    types.Prompt(
        name="create_automation",
        title="Create Automation",
        description="Step-by-step guide to create a new automation. Helps identify triggers, conditions, and actions.",
        arguments=[
            types.PromptArgument(name="goal", description="What you want the automation to accomplish", required=True),
        ],
    ),
    types.Prompt(
        name="energy_audit",
        title="Energy Audit",
        description="Analyze energy usage and suggest optimizations. Reviews power sensors, lights, climate, and usage patterns.",
        arguments=[],
    ),
    types.Prompt(
        name="scene_builder",
        title="Scene Builder",
        description="Interactive scene creation assistant. Captures current states or helps design new scenes.",
        arguments=[
            types.PromptArgument(name="area", description="Area to create scene for (optional)", required=False),
            types.PromptArgument(
                name="mood",
                description="Desired mood/atmosphere (e.g., 'relaxing', 'movie night', 'energizing')",
                required=False,
            ),
        ],
    ),
    types.Prompt(
        name="security_review",
        title="Security Review",
        description="Review security-related entities and suggest improvements. Checks locks, sensors, cameras, and alarm systems.",
        arguments=[],
    ),
    types.Prompt(
        name="morning_routine",
        title="Morning Routine Designer",
        description="Design a morning routine automation based on your devices and preferences.",
        arguments=[
            types.PromptArgument(name="wake_time", description="Usual wake-up time (e.g., '7:00 AM')", required=False),
        ],
    ),
]


def _required(arguments: dict, name: str) -> str:
    value = arguments.get(name)
    if not value:
        raise ValueError(f"{name} is required")
    return value


def _prompt(description: str, text: str) -> types.GetPromptResult:
    return types.GetPromptResult(
        description=description,
        messages=[
            types.PromptMessage(
                role="user",
                content=create_text_content(text, audience=["assistant"], priority=1.0),
            )
        ],
    )


def troubleshoot_entity(arguments: dict) -> types.GetPromptResult:
    entity_id = _required(arguments, "entity_id")
    problem = arguments.get("problem_description") or "not working as expected"

    return _prompt(
        f"Troubleshooting guide for {entity_id}",
        f"""I need help troubleshooting an entity in Home Assistant.

**Entity:** {entity_id}
**Problem:** {problem}

Please help me diagnose and fix this issue. Start by:
1. Using the `diagnose_entity` tool to get current state and history
2. Check if the entity is available and responding
3. Look at related entities that might be affected
4. Review the error log for any related messages
5. Suggest specific fixes based on what you find

Focus on practical solutions I can implement.""",
    )


def create_automation(arguments: dict) -> types.GetPromptResult:
    goal = _required(arguments, "goal")

    return _prompt(
        "Automation creation guide",
        f"""I want to create a new Home Assistant automation.

**Goal:** {goal}

Please help me create this automation by:
1. First, use `search_entities` to find relevant entities for this automation
2. Identify the best trigger(s) for this use case
3. Suggest any conditions that might be needed
4. Define the action(s) to take
5. Provide the complete automation YAML code

Also check if similar automations already exist using `get_states` with domain "automation".

Consider edge cases and make the automation robust.""",
    )


def energy_audit(arguments: dict) -> types.GetPromptResult:
    return _prompt(
        "Energy usage analysis and optimization",
        """Please perform an energy audit of my Home Assistant setup.

Steps:
1. Use `search_entities` to find all energy/power related sensors
2. Check the current state of all lights using `get_states` with domain "light"
3. Review climate/thermostat entities
4. Look for smart plugs and their power consumption
5. Get suggestions using the `get_suggestions` tool

Provide a summary including:
- Current energy consumers that are active
- Potential energy savings opportunities
- Automation suggestions to reduce energy usage
- Any anomalies in power consumption""",
    )


def scene_builder(arguments: dict) -> types.GetPromptResult:
    area = arguments.get("area") or "the specified area"
    mood = arguments.get("mood") or "comfortable"

    return _prompt(
        "Interactive scene creation",
        f"""Help me create a new scene for {area} with a "{mood}" mood.

Steps:
1. Use `get_areas` to understand the available areas
2. Use `search_entities` to find controllable entities in the area (lights, switches, etc.)
3. For lights, suggest appropriate brightness and color temperature settings
4. For climate devices, suggest appropriate temperatures
5. Consider any media players or other relevant devices

Provide:
- A descriptive name for the scene
- Complete scene YAML configuration
- Any automations that might trigger this scene
- Tips for adjusting the scene""",
    )


def security_review(arguments: dict) -> types.GetPromptResult:
    return _prompt(
        "Security review of Home Assistant setup",
        """Please perform a security review of my Home Assistant setup.

Steps:
1. Use `search_entities` to find all security-related entities:
   - Door/window sensors (binary_sensor with device_class door/window)
   - Motion sensors
   - Lock entities
   - Alarm panels
   - Camera entities

2. Check current states using `get_states`
3. Use `detect_anomalies` to find any issues
4. Review automation coverage for security scenarios

Provide:
- Current security status (all doors locked? sensors active?)
- Any vulnerabilities or gaps in coverage
- Suggested automations for better security
- Best practices recommendations""",
    )


def morning_routine(arguments: dict) -> types.GetPromptResult:
    wake_time = arguments.get("wake_time") or "7:00 AM"

    return _prompt(
        "Morning routine automation design",
        f"""Help me design a morning routine automation for {wake_time}.

Steps:
1. Use `search_entities` to find relevant devices:
   - Bedroom lights
   - Coffee maker or kitchen appliances
   - Thermostat/climate
   - Window blinds/covers
   - Speakers for announcements

2. Check existing automations with `get_states` domain "automation"
3. Consider calendar integration using `get_calendars`

Design a routine that:
- Gradually increases lighting
- Adjusts temperature for waking
- Optionally starts coffee/breakfast prep
- Provides weather or calendar briefing

Provide complete automation YAML and any required helper entities.""",
    )


PROMPT_BUILDERS: dict[str, Callable[[dict], types.GetPromptResult]] = {
    "troubleshoot_entity": troubleshoot_entity,
    "create_automation": create_automation,
    "energy_audit": energy_audit,
    "scene_builder": scene_builder,
    "security_review": security_review,
    "morning_routine": morning_routine,
}


def get_prompt(name: str, arguments: Optional[dict[str, str]] = None) -> types.GetPromptResult:
    """
    Render a prompt.

    Raises:
        ValueError: For an unknown prompt or a missing required argument
    """
    builder = PROMPT_BUILDERS.get(name)
    if builder is None:
        raise ValueError(f"Unknown prompt: {name}")

    logger.debug(f"Rendering prompt: {name}")
    return builder(arguments or {})
