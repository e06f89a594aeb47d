"""Progress routes (read and reset the learner's journey)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from chronos_guru.api.deps import get_progress_store
from chronos_guru.api.models import ProgressResponse
from chronos_guru.core.progress import ProgressStore

router = APIRouter()


@router.get("/progress", response_model=ProgressResponse, summary="Get progress")
def get_progress(store: ProgressStore = Depends(get_progress_store)) -> ProgressResponse:
    """Points, badges and per-figure quiz history."""
    return ProgressResponse(**store.load().model_dump())


@router.post(
    "/progress/reset", response_model=ProgressResponse, summary="Reset the journey"
)
def reset_progress(
    store: ProgressStore = Depends(get_progress_store),
) -> ProgressResponse:
    """Delete the stored record; everything returns to zero."""
    return ProgressResponse(**store.reset().model_dump())
