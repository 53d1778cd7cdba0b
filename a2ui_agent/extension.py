"""A2UI extension negotiation."""

from typing import Any, Iterable, Optional

from .models import AgentExtension, Part

A2UI_EXTENSION_URI = "https://a2ui.org/a2a-extension/a2ui/v0.8"
A2UI_MIME_TYPE = "application/json+a2ui"


def get_a2ui_agent_extension() -> AgentExtension:
    """Extension entry advertised in the agent card."""
    return AgentExtension(
        uri=A2UI_EXTENSION_URI,
        description="Provides agent driven UI using the A2UI JSON format.",
        required=False,
    )


def try_activate_a2ui_extension(requested_extensions: Optional[Iterable[str]]) -> bool:
    """
    Decide whether the caller asked for rich UI output.

    True if any requested extension equals the A2UI extension URI or
    contains it (clients sometimes send it with a suffix or parameters).
    """
    if not requested_extensions:
        return False
    return any(
        ext == A2UI_EXTENSION_URI or A2UI_EXTENSION_URI in ext
        for ext in requested_extensions
        if ext
    )


def create_a2ui_part(ui_message: Any) -> Part:
    """Wrap one A2UI message as a data part."""
    return Part.data_part(ui_message, metadata={"mimeType": A2UI_MIME_TYPE})


def collect_requested_extensions(*sources: Optional[Iterable[str]]) -> list[str]:
    """Merge extension lists from header, message and task metadata, keeping order."""
    seen: dict[str, None] = {}
    for source in sources:
        if not source:
            continue
        if isinstance(source, str):
            source = source.split(",")
        for ext in source:
            if not isinstance(ext, str):
                continue
            ext = ext.strip()
            if ext:
                seen.setdefault(ext, None)
    return list(seen)
