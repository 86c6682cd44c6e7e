"""
api/routes/analysis.py -- Read-only analysis reporting endpoints.

Routes:
  GET /api/analysis/category-counts -- dashboard counters
  GET /api/analysis/history         -- every stored analysis, newest first

Both routes are public: the dashboard renders them before sign-in.
"""

from fastapi import APIRouter, Request

from analysis.store import AnalysisStore
from api.models import AnalysisRecord, CategoryCountsResponse

router = APIRouter()


@router.get("/analysis/category-counts", response_model=CategoryCountsResponse)
def category_counts(request: Request) -> CategoryCountsResponse:
    """Return today / total / oncology / neurology analysis counts.

    Response:
      todayCount   -- analyses created in the trailing 24 hours
      totalCount   -- all analyses
      cancerCount  -- diagnosis matches Cancer|Benign|Malignant|Normal (case-insensitive)
      neuroCount   -- diagnosis matches Seizure|MS|Alzheimer|Control (case-insensitive)
    """
    store: AnalysisStore = request.app.state.analysis_store
    return CategoryCountsResponse(**store.category_counts())


@router.get("/analysis/history", response_model=list[AnalysisRecord])
def history(request: Request) -> list[AnalysisRecord]:
    """Return all analyses ordered by creation time, newest first."""
    store: AnalysisStore = request.app.state.analysis_store
    return [AnalysisRecord.from_domain(a) for a in store.list_recent()]
