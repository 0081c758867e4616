"""Route aggregation for the assessment platform API."""

from fastapi import APIRouter

from . import analytics, assessment, auth, submission

router = APIRouter()
router.include_router(auth.router)
router.include_router(assessment.router)
router.include_router(submission.router)
router.include_router(analytics.router)
