"""
Centralized Configuration Management
====================================
All configuration values are read from environment variables, with an
optional .env file for local development.
"""
import os
from typing import List
from enum import Enum

from dotenv import load_dotenv

load_dotenv()


class Environment(str, Enum):
    """Deployment environment types"""
    DEV = "dev"
    UAT = "uat"
    PROD = "prod"
    LOCAL = "local"


class Config:
    """Base configuration with environment-aware settings"""

    # ==================== ENVIRONMENT DETECTION ====================
    @staticmethod
    def get_environment() -> Environment:
        """Detect current deployment environment from ENV variable"""
        env = os.getenv("ENV", "local").lower()
        if env in ["dev", "development"]:
            return Environment.DEV
        elif env in ["uat", "staging"]:
            return Environment.UAT
        elif env in ["prod", "production"]:
            return Environment.PROD
        return Environment.LOCAL

    ENVIRONMENT = get_environment()

    # ==================== DATABASE CONFIGURATION ====================
    DATABASE_URL: str = os.getenv("DATABASE_URL", "").strip()
    if not DATABASE_URL and ENVIRONMENT == Environment.LOCAL:
        DATABASE_URL = "sqlite:///./sqlquest.db"

    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "20"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # ==================== SANDBOX CONFIGURATION ====================
    SANDBOX_QUERY_TIMEOUT_SECONDS: float = float(os.getenv("SANDBOX_QUERY_TIMEOUT_SECONDS", "5"))
    SANDBOX_MEMORY_LIMIT_MB: int = int(os.getenv("SANDBOX_MEMORY_LIMIT_MB", "128"))
    SANDBOX_THREADS: int = int(os.getenv("SANDBOX_THREADS", "1"))
    SANDBOX_MAX_RESULT_ROWS: int = int(os.getenv("SANDBOX_MAX_RESULT_ROWS", "10000"))

    # ==================== FRONTEND & CORS CONFIGURATION ====================
    FRONTEND_URLS: List[str] = [
        url.strip()
        for url in os.getenv("FRONTEND_URLS", "").split(",")
        if url.strip()
    ]

    @staticmethod
    def get_cors_origins() -> List[str]:
        """Get environment-specific CORS origins"""
        origins = list(Config.FRONTEND_URLS)

        if Config.ENVIRONMENT == Environment.LOCAL:
            origins.extend([
                "http://localhost:5000",
                "http://localhost:3000",
                "http://127.0.0.1:5000",
                "http://127.0.0.1:3000"
            ])

        return list(set(origins))

    # ==================== SERVER CONFIGURATION ====================
    PORT: int = int(os.getenv("PORT", "5000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")

    # ==================== LOGGING & MONITORING ====================
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    ENABLE_SQL_LOGGING: bool = os.getenv("ENABLE_SQL_LOGGING", "false").lower() == "true"

    # ==================== VALIDATION ====================
    @classmethod
    def validate_config(cls) -> None:
        """Validate critical configuration settings"""
        errors = []

        if not cls.DATABASE_URL:
            errors.append("DATABASE_URL is required outside the local environment")
        if cls.SANDBOX_QUERY_TIMEOUT_SECONDS <= 0:
            errors.append("SANDBOX_QUERY_TIMEOUT_SECONDS must be positive")
        if cls.SANDBOX_MEMORY_LIMIT_MB < 16:
            errors.append("SANDBOX_MEMORY_LIMIT_MB must be at least 16")
        if cls.SANDBOX_THREADS < 1:
            errors.append("SANDBOX_THREADS must be at least 1")
        if cls.SANDBOX_MAX_RESULT_ROWS < 1:
            errors.append("SANDBOX_MAX_RESULT_ROWS must be at least 1")

        if errors:
            raise ValueError(f"Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    @classmethod
    def print_config_summary(cls) -> None:
        """Print configuration summary (without secrets)"""
        print("\n" + "=" * 60)
        print(f"SQLQuest Configuration Summary - {cls.ENVIRONMENT.value.upper()} Environment")
        print("=" * 60)
        print(f"Database: {cls.DATABASE_URL.split('://')[0]}")
        print(f"Sandbox timeout: {cls.SANDBOX_QUERY_TIMEOUT_SECONDS}s")
        print(f"Sandbox memory limit: {cls.SANDBOX_MEMORY_LIMIT_MB}MB")
        print(f"Sandbox threads: {cls.SANDBOX_THREADS}")
        print(f"Max result rows: {cls.SANDBOX_MAX_RESULT_ROWS}")
        print(f"CORS Origins: {len(cls.get_cors_origins())} allowed")
        print(f"Port: {cls.PORT}")
        print("=" * 60 + "\n")


# Validate configuration on import
try:
    Config.validate_config()
except ValueError as e:
    print(f"❌ Configuration Error: {e}")
    raise
