"""표시용 포맷 분류."""

from __future__ import annotations

from typing import Optional

from search_api.app.domain.utils import humanize_plural

PRESENTATION_FORMAT_TRANSLATION = {
    "planner": "answer",
    "smart_answer": "answer",
    "calculator": "answer",
    "licence_finder": "answer",
    "custom_application": "answer",
    "calendar": "answer",
}

FORMAT_NAME_ALTERNATIVES = {
    "programme": "Benefits & credits",
    "transaction": "Services",
    "local_transaction": "Services",
    "place": "Services",
    "answer": "Quick answers",
    "specialist_guidance": "Specialist guidance",
}


def normalized_format(format: Optional[str]) -> str:
    if not format:
        return "unknown"
    return format.replace("-", "_")


def presentation_format(format: Optional[str]) -> str:
    normalized = normalized_format(format)
    return PRESENTATION_FORMAT_TRANSLATION.get(normalized, normalized)


def humanized_format(format: Optional[str]) -> str:
    presentation = presentation_format(format)
    return FORMAT_NAME_ALTERNATIVES.get(presentation) or humanize_plural(presentation)
