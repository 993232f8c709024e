"""
Read-only analytics over tasks and recognitions.
"""

from .unsung_hero import build_unsung_hero_report, generate_unsung_hero_report, unsung_hero_score
from .heatmap import build_contribution_heatmap, generate_contribution_heatmap, quantize_intensity
from .summary import build_user_summary, get_user_analytics

__all__ = [
    "build_unsung_hero_report",
    "generate_unsung_hero_report",
    "unsung_hero_score",
    "build_contribution_heatmap",
    "generate_contribution_heatmap",
    "quantize_intensity",
    "build_user_summary",
    "get_user_analytics",
]
