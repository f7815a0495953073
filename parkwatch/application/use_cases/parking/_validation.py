from __future__ import annotations

from parkwatch.application.errors import ValidationError


def require_text(**fields: str | None) -> dict[str, str]:
    """Strip the given fields and fail if any of them is missing or blank."""
    cleaned: dict[str, str] = {}
    missing: list[str] = []
    for name, value in fields.items():
        text = value.strip() if isinstance(value, str) else ""
        if not text:
            missing.append(name)
        cleaned[name] = text
    if missing:
        raise ValidationError(
            f"Missing required fields: {', '.join(missing)}", details={"missing": missing}
        )
    return cleaned
