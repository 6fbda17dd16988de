from __future__ import annotations

from .loader import BundleConfig, GuideEntry, config_payload, load_config

__all__ = ["BundleConfig", "GuideEntry", "config_payload", "load_config"]
