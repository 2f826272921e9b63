"""Default pipeline stage definitions and limits."""

from __future__ import annotations


MAX_STAGES_PER_PIPELINE = 12
STAGE_LIMIT_MESSAGE = "Pipeline não pode ter mais de 12 estágios"

DEFAULT_STAGE_COLOR = "#3b82f6"

# Seeded into new pipelines and used for by-stage buckets when no pipeline is given
DEFAULT_STAGES = [
    {"title": "Prospecção", "color": "#3b82f6"},
    {"title": "Qualificação", "color": "#f59e0b"},
    {"title": "Proposta", "color": "#10b981"},
    {"title": "Fechamento", "color": "#ef4444"},
]

FALLBACK_STAGE_TITLES = [stage["title"] for stage in DEFAULT_STAGES]
DEFAULT_DEAL_STAGE = FALLBACK_STAGE_TITLES[0]


def get_default_stage_defs() -> list[dict]:
    """Generate default stage definitions with positions 0..n-1."""
    return [
        {
            "title": stage["title"],
            "color": stage["color"],
            "position": position,
            "is_default": True,
        }
        for position, stage in enumerate(DEFAULT_STAGES)
    ]
