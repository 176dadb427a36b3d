"""Bundle entitlement API router."""

from fastapi import APIRouter

from bundle_engine.entitlements.schemas import BundleParseResponse, BundleRecord

router = APIRouter()


def _get_service():
    from bundle_engine.deps import get_progress_service
    return get_progress_service()


@router.post("/bundles/parse", response_model=BundleParseResponse)
async def parse_bundle(body: BundleRecord):
    svc = _get_service()
    return svc.describe_bundle(body)
