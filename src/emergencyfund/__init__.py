"""Emergency fund runway engine."""

from __future__ import annotations

from .config import BaseConfig, TestingConfig

PLUGIN_MANIFEST = {
    "id": "emergency-fund",
    "name": "Emergency Fund",
    "version": "0.1.0",
    "description": "Track emergency fund runway based on your actual expenses",
    "permissions": {
        "tables": {
            "write": [
                "emergency_fund_config",
                "emergency_fund_snapshot",
            ],
        },
    },
}

__all__ = ["BaseConfig", "TestingConfig", "PLUGIN_MANIFEST"]
