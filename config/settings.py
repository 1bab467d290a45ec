import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(Path(__file__).parent.parent / ".env")

class Settings:
    APP_ENV: str = os.getenv("APP_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    MOCK_MODE: bool = os.getenv("MOCK_MODE", "true").lower() == "true"
    DATA_API_URL: str = os.getenv("DATA_API_URL", "")
    DATA_API_KEY: str = os.getenv("DATA_API_KEY", "")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "30"))
    REPORT_OUTPUT_DIR: Path = Path(os.getenv("REPORT_OUTPUT_DIR", "./reports"))
    REPORT_DIVISION: str = os.getenv("REPORT_DIVISION", "B2B")
    REPORT_TEAM: str = os.getenv("REPORT_TEAM", "Zeus")
    ORGANIZATION_NAME: str = os.getenv("ORGANIZATION_NAME", "Unknown Organization")
    VERSION: str = "1.0.0"
    APP_NAME: str = "Risk Assessment Hub"

    @classmethod
    def validate(cls) -> list:
        warnings = []
        if cls.MOCK_MODE:
            warnings.append("MOCK MODE active — no backend calls, built-in sample data.")
        elif not cls.is_backend_configured():
            warnings.append("DATA_API_URL / DATA_API_KEY not set — backend unreachable.")
        return warnings

    @classmethod
    def is_backend_configured(cls) -> bool:
        return bool(cls.DATA_API_URL and cls.DATA_API_KEY)

settings = Settings()
