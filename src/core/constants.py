"""Core constants used across Subtrack modules.

This module centralizes service names, dump layout, and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

ENTITLEMENT_SERVICE_NAME = "entitlement-service"
BILLING_SERVICE_NAME = "billing-service"
ENTITLEMENT_BILLING_SERVICE_NAME = "entitlement+billing-service"
# Combined events fan out to exactly these services, in this order.
COMBINED_SERVICE_CONSTITUENTS = (ENTITLEMENT_SERVICE_NAME, BILLING_SERVICE_NAME)

DEFAULT_DATA_ROOT = Path(".subtrack")
ACCOUNTS_DIR_NAME = "accounts"
SUPPORTED_DUMP_EXTENSIONS = (".yaml", ".yml", ".json")
DUMP_SCHEMA_VERSION = 1
DEFAULT_REFERENCE_CURRENCY = "USD"
DEFAULT_ACCOUNT_RECORD_ID = 0
DEFAULT_TENANT_RECORD_ID = 0
TEST_ACCOUNT_TAG = "TEST"
PARTNER_ACCOUNT_TAG = "PARTNER"
DEFAULT_LOG_LEVEL = "INFO"
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
