# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - asset_urls.py: Delivery URL parsing (handle / resource type derivation)
# - supabase_client.py: Shared Supabase client for the document store
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.asset_urls import (
    DeliveryUrl,
    HandleDerivationError,
    derive_handle,
    infer_resource_type,
    parse_delivery_url,
)
from lib.supabase_client import SupabaseClient, SupabaseClientError

__all__ = [
    # Asset URLs
    "DeliveryUrl",
    "HandleDerivationError",
    "derive_handle",
    "infer_resource_type",
    "parse_delivery_url",
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
]
