"""Evaluation pipeline: record projection, filter, sort and page slicing."""

from .evaluator import (
    EvaluationResult,
    evaluate,
    filter_frame,
    paginate_frame,
    sort_frame,
)
from .frame import build_frame, compute_frame_hash
from .pages import (
    clamp_page,
    compute_total_pages,
    page_bounds,
    visible_page_numbers,
)

__all__ = [
    "evaluate",
    "EvaluationResult",
    "filter_frame",
    "sort_frame",
    "paginate_frame",
    "build_frame",
    "compute_frame_hash",
    "compute_total_pages",
    "clamp_page",
    "page_bounds",
    "visible_page_numbers",
]
