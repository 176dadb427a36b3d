"""Bundle-Engine: entitlement parsing and progress tracking for coaching bundles."""

from bundle_engine.client import BundleClient
from bundle_engine.entitlements.parser import (
    parse_bundle_goals,
    parse_bundle_products,
    parse_bundle_services,
)
from bundle_engine.progress.calculator import ProgressSnapshot, compute_bundle_progress
from bundle_engine.progress.deliveries import build_delivered_qty_map

__all__ = [
    "BundleClient",
    "parse_bundle_goals",
    "parse_bundle_products",
    "parse_bundle_services",
    "ProgressSnapshot",
    "compute_bundle_progress",
    "build_delivered_qty_map",
]
__version__ = "0.1.0"
