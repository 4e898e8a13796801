"""
Configuration management for the Metis gateway client.

Loads environment variables from .env file and provides typed access to configuration.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


class Config:
    """Configuration class for the Metis gateway client."""

    # Metis API
    METIS_API_KEY = os.getenv("METIS_API_KEY", "")
    METIS_BASE_URL = os.getenv("METIS_BASE_URL", "https://api.metisai.ir")
    METIS_CLIENT_ID = os.getenv("METIS_CLIENT_ID", "metis-gateway-client/1.0.0")
    METIS_USER_AGENT = os.getenv("METIS_USER_AGENT", "metis-gateway-client/1.0.0")

    # None means no client-side timeout: calls wait as long as the transport does
    METIS_HTTP_TIMEOUT_S = _optional_float("METIS_HTTP_TIMEOUT_S")

    # Task polling defaults
    DEFAULT_POLL_INTERVAL_S = int(os.getenv("METIS_POLL_INTERVAL_S", "5"))
    DEFAULT_TIMEOUT_MINUTES = int(os.getenv("METIS_TIMEOUT_MINUTES", "30"))

    # Host API
    PORT = int(os.getenv("PORT", "8000"))
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> bool:
        """Validate that required configuration is set."""
        required = ["METIS_API_KEY"]
        missing = [key for key in required if not getattr(cls, key)]

        if missing:
            print(f"⚠️  Missing required environment variables: {', '.join(missing)}")
            print(f"   Please set them in .env file")
            return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Metis API Key: {'✓ Set' if Config.METIS_API_KEY else '✗ Missing'}")
    print(f"  Metis Base URL: {Config.METIS_BASE_URL}")
    print(f"  Poll Interval: {Config.DEFAULT_POLL_INTERVAL_S}s")
    print(f"  Timeout: {Config.DEFAULT_TIMEOUT_MINUTES}min")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
