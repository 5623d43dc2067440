# -*- coding: utf-8 -*-
"""
Traceability Service Configuration - FoodSafe Traceability Core

Centralized configuration for the traceability and recall-risk core covering:
- Recall risk thresholds: supplier audit score floor, complaint trend ceiling
- Genealogy: default tree expansion depth
- Batch processing: max size, worker count
- Non-conformance escalation: days-in-status thresholds
- Provenance toggle
- Logging level

All settings can be overridden via environment variables with the
``FS_TRACEABILITY_`` prefix (e.g. ``FS_TRACEABILITY_SUPPLIER_AUDIT_THRESHOLD``).

The escalation thresholds (7/14 days On Hold, 5/10 days Under Review) are
quality-policy values carried over from operations and still await
food-safety sign-off.

Example:
    >>> from foodsafe.traceability.config import get_config
    >>> cfg = get_config()
    >>> print(cfg.supplier_audit_threshold, cfg.complaint_trend_threshold)
    80.0 15.0

Author: FoodSafe Platform Team
Status: Production Ready
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Environment variable prefix
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FS_TRACEABILITY_"


# ---------------------------------------------------------------------------
# TraceabilityConfig
# ---------------------------------------------------------------------------


@dataclass
class TraceabilityConfig:
    """Complete configuration for the FoodSafe traceability core.

    Attributes:
        supplier_audit_threshold: Audit score below which a supplier is a
            recall trigger.
        complaint_trend_threshold: Complaint increase (percent) above which a
            product's batches are flagged.
        default_tree_depth: Default max depth for genealogy tree expansion.
        batch_max_size: Maximum number of batches per parallel evaluation.
        batch_worker_count: Number of worker threads for batch evaluation.
        on_hold_escalation_days: Days On Hold before medium escalation.
        on_hold_high_escalation_days: Days On Hold before high escalation.
        under_review_escalation_days: Days Under Review before medium escalation.
        under_review_high_escalation_days: Days Under Review before high escalation.
        enable_provenance: Whether the service records SHA-256 provenance.
        log_level: Logging level for the traceability service.
    """

    # -- Recall risk ---------------------------------------------------------
    supplier_audit_threshold: float = 80.0
    complaint_trend_threshold: float = 15.0

    # -- Genealogy -----------------------------------------------------------
    default_tree_depth: int = 25

    # -- Batch processing ----------------------------------------------------
    batch_max_size: int = 1000
    batch_worker_count: int = 4

    # -- Escalation policy ---------------------------------------------------
    on_hold_escalation_days: int = 7
    on_hold_high_escalation_days: int = 14
    under_review_escalation_days: int = 5
    under_review_high_escalation_days: int = 10

    # -- Provenance ----------------------------------------------------------
    enable_provenance: bool = True

    # -- Logging -------------------------------------------------------------
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Factory helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> TraceabilityConfig:
        """Build a TraceabilityConfig from environment variables.

        Every field can be overridden via ``FS_TRACEABILITY_<FIELD_UPPER>``.
        Boolean values accept ``true/1/yes`` (case-insensitive).

        Returns:
            Populated TraceabilityConfig instance.
        """
        prefix = _ENV_PREFIX

        def _env(name: str, default: Any = None) -> Optional[str]:
            return os.environ.get(f"{prefix}{name}", default)

        def _bool(name: str, default: bool) -> bool:
            val = _env(name)
            if val is None:
                return default
            return val.lower() in ("true", "1", "yes")

        def _int(name: str, default: int) -> int:
            val = _env(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                logger.warning(
                    "Invalid integer for %s%s=%s, using default %d",
                    prefix, name, val, default,
                )
                return default

        def _float(name: str, default: float) -> float:
            val = _env(name)
            if val is None:
                return default
            try:
                return float(val)
            except ValueError:
                logger.warning(
                    "Invalid float for %s%s=%s, using default %f",
                    prefix, name, val, default,
                )
                return default

        def _str(name: str, default: str) -> str:
            val = _env(name)
            if val is None:
                return default
            return val

        config = cls(
            supplier_audit_threshold=_float(
                "SUPPLIER_AUDIT_THRESHOLD", cls.supplier_audit_threshold,
            ),
            complaint_trend_threshold=_float(
                "COMPLAINT_TREND_THRESHOLD", cls.complaint_trend_threshold,
            ),
            default_tree_depth=_int(
                "DEFAULT_TREE_DEPTH", cls.default_tree_depth,
            ),
            batch_max_size=_int("BATCH_MAX_SIZE", cls.batch_max_size),
            batch_worker_count=_int(
                "BATCH_WORKER_COUNT", cls.batch_worker_count,
            ),
            on_hold_escalation_days=_int(
                "ON_HOLD_ESCALATION_DAYS", cls.on_hold_escalation_days,
            ),
            on_hold_high_escalation_days=_int(
                "ON_HOLD_HIGH_ESCALATION_DAYS",
                cls.on_hold_high_escalation_days,
            ),
            under_review_escalation_days=_int(
                "UNDER_REVIEW_ESCALATION_DAYS",
                cls.under_review_escalation_days,
            ),
            under_review_high_escalation_days=_int(
                "UNDER_REVIEW_HIGH_ESCALATION_DAYS",
                cls.under_review_high_escalation_days,
            ),
            enable_provenance=_bool(
                "ENABLE_PROVENANCE", cls.enable_provenance,
            ),
            log_level=_str("LOG_LEVEL", cls.log_level),
        )

        logger.info(
            "TraceabilityConfig loaded: supplier_threshold=%.1f, "
            "complaint_threshold=%.1f, tree_depth=%d, "
            "batch_size=%d, workers=%d, escalation=[%d,%d,%d,%d], "
            "provenance=%s",
            config.supplier_audit_threshold,
            config.complaint_trend_threshold,
            config.default_tree_depth,
            config.batch_max_size,
            config.batch_worker_count,
            config.on_hold_escalation_days,
            config.on_hold_high_escalation_days,
            config.under_review_escalation_days,
            config.under_review_high_escalation_days,
            config.enable_provenance,
        )
        return config


# ---------------------------------------------------------------------------
# Thread-safe singleton accessor
# ---------------------------------------------------------------------------

_config_instance: Optional[TraceabilityConfig] = None
_config_lock = threading.Lock()


def get_config() -> TraceabilityConfig:
    """Return the singleton TraceabilityConfig, creating from env if needed.

    Returns:
        TraceabilityConfig singleton instance.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = TraceabilityConfig.from_env()
    return _config_instance


def set_config(config: TraceabilityConfig) -> None:
    """Replace the singleton TraceabilityConfig (useful for testing).

    Args:
        config: New configuration to install.
    """
    global _config_instance
    with _config_lock:
        _config_instance = config
    logger.info("TraceabilityConfig replaced programmatically")


def reset_config() -> None:
    """Reset the singleton (primarily for test teardown)."""
    global _config_instance
    with _config_lock:
        _config_instance = None


def get_cfg_value(config: Any, key: str, default: Any) -> Any:
    """Read a setting from a TraceabilityConfig, a dict, or fall back.

    Args:
        config: TraceabilityConfig, dict, or None.
        key: Configuration key.
        default: Value used when the key is absent.

    Returns:
        Configured value or default.
    """
    if config is None:
        return default
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)


__all__ = [
    "TraceabilityConfig",
    "get_config",
    "set_config",
    "reset_config",
    "get_cfg_value",
]
