"""Entity id generation."""

import uuid


def generate_id(prefix: str) -> str:
    """
    Build a collision-resistant id scoped to an entity type.

    Example: generate_id("task") -> "task_3f2c0d1e9a8b4c7d8e6f5a4b3c2d1e0f"
    """
    return f"{prefix}_{uuid.uuid4().hex}"
