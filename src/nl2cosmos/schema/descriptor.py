from __future__ import annotations

from typing import Mapping

from pydantic import BaseModel, Field


class FieldDescription(BaseModel):
    """A single document property exposed to the query generator."""

    name: str = Field(..., min_length=1, description="JSON property name as stored in the container.")
    description: str = Field(default="", description="Human-readable meaning of the property.")


def build_schema_descriptor(
    title: str,
    fields: Mapping[str, str],
    note: str = "These are the actual JSON property names stored in the container.",
) -> str:
    """Renders a field mapping into the schema text block consumed by the prompt compiler.

    Each property is emitted as ``["name"] = Description`` so the completion
    service sees the exact JSON property names.

    Args:
        title (str): Heading for the block, usually the record type name.
        fields (Mapping[str, str]): Property name to description.
        note (str): Trailing remark appended after the property count.

    Returns:
        str: The schema descriptor text.
    """
    entries = [FieldDescription(name=name, description=desc) for name, desc in fields.items()]

    lines = [f"{title} Schema - JSON Field Mapping:", ""]
    for entry in entries:
        lines.append(f'["{entry.name}"] = {entry.description}'.rstrip())
    lines.append("")
    lines.append(f"Total Properties: {len(entries)}")
    if note:
        lines.append(f"Note: {note}")
    return "\n".join(lines)
