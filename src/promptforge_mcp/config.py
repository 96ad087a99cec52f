#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2025 PromptForge Contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""
Configuration module for PromptForge MCP Server
Centralizes all configuration values and environment variables
"""

import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class ServerConfig:
    """Configuration for the MCP server"""

    # External pattern storage (JSONBin-style document)
    patterns_api_endpoint: str = field(
        default_factory=lambda: os.getenv("PATTERNS_API_ENDPOINT", "")
    )
    patterns_api_key: str = field(default_factory=lambda: os.getenv("PATTERNS_API_KEY", ""))

    # External analytics sink (PostgREST-style table)
    analytics_api_endpoint: str = field(
        default_factory=lambda: os.getenv("ANALYTICS_API_ENDPOINT", "")
    )
    analytics_api_key: str = field(default_factory=lambda: os.getenv("ANALYTICS_API_KEY", ""))

    # Network timeouts (seconds)
    store_timeout: float = field(
        default_factory=lambda: float(os.getenv("PROMPTFORGE_STORE_TIMEOUT", "5.0"))
    )
    analytics_timeout: float = field(
        default_factory=lambda: float(os.getenv("PROMPTFORGE_ANALYTICS_TIMEOUT", "5.0"))
    )

    # Cache Configuration
    cache_ttl_seconds: float = field(
        default_factory=lambda: float(os.getenv("PROMPTFORGE_CACHE_TTL", "300"))
    )

    # Domain detection
    detection_mode: str = field(
        default_factory=lambda: os.getenv("PROMPTFORGE_DETECTION_MODE", "weighted")
    )
    feature_bonus: float = 0.5
    detection_k: float = 5.0
    max_detection_confidence: float = 0.95
    ratio_threshold: float = 0.3

    # Confidence estimation
    confidence_base: float = field(
        default_factory=lambda: float(os.getenv("PROMPTFORGE_CONFIDENCE_BASE", "0.6"))
    )
    per_modification_bonus: float = 0.08
    max_modification_bonus: float = 0.24
    domain_match_bonus: float = 0.15
    max_confidence: float = 0.99

    # Prompt Validation
    max_prompt_length: int = field(
        default_factory=lambda: int(os.getenv("MAX_PROMPT_LENGTH", "10000"))
    )

    # Display Configuration
    prompt_preview_length: int = 50
    alternatives_count: int = 2

    # HTTP transport
    http_host: str = field(default_factory=lambda: os.getenv("MCP_HTTP_HOST", "127.0.0.1"))
    http_port: int = field(default_factory=lambda: int(os.getenv("MCP_HTTP_PORT", "8000")))
    cors_origins: list[str] = field(
        default_factory=lambda: _csv_env(
            "MCP_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
        )
    )

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "WARNING"))

    def missing_settings(self) -> list[str]:
        """Names of external-service settings that are not configured"""
        required = {
            "PATTERNS_API_ENDPOINT": self.patterns_api_endpoint,
            "PATTERNS_API_KEY": self.patterns_api_key,
            "ANALYTICS_API_ENDPOINT": self.analytics_api_endpoint,
            "ANALYTICS_API_KEY": self.analytics_api_key,
        }
        return [name for name, value in required.items() if not value]

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary"""
        return {
            "patterns_store": "remote" if self.patterns_api_endpoint else "memory",
            "analytics_sink": "remote" if self.analytics_api_endpoint else "memory",
            "store_timeout": self.store_timeout,
            "analytics_timeout": self.analytics_timeout,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "detection_mode": self.detection_mode,
            "confidence_base": self.confidence_base,
            "max_confidence": self.max_confidence,
            "max_prompt_length": self.max_prompt_length,
        }


# Global configuration instance
config = ServerConfig()
