"""
Configuration settings management
Centralized configuration using environment variables
"""
import os
from pathlib import Path
from functools import lru_cache
from dotenv import load_dotenv


class Settings:
    """Application settings loaded from environment variables"""

    # Local system of record
    data_dir: str = "data"

    # LLM configuration (OpenAI-compatible endpoint, optional)
    llm_base_url: str = ""
    llm_api_key: str = ""
    classify_model: str = "gpt-4o-mini"
    summarize_model: str = "gpt-4o-mini"
    llm_timeout: float = 10.0
    llm_temperature: float = 0.1
    llm_max_retries: int = 2
    llm_max_tokens: int = 4096

    # Content fetching
    reader_url: str = "https://r.jina.ai"
    reader_timeout: float = 8.0
    max_content_length: int = 15000

    # Share intake and extraction
    max_text_length: int = 10000
    default_currency: str = "USD"

    # Action execution
    reminder_min_lead_seconds: int = 10
    app_calendar_name: str = "Ada"
    reminder_title: str = "Ada Reminder"

    # Stores
    page_limit: int = 50

    # Logging
    log_level: str = "INFO"
    log_file: str = ""

    def __init__(self, load_env: bool = True):
        """
        Load settings from environment variables

        Args:
            load_env: Read a .env file before looking at the environment
        """
        if load_env:
            env_path = Path(__file__).parent.parent.parent / '.env'
            if env_path.exists():
                load_dotenv(env_path)
            else:
                load_dotenv()

        self.data_dir = os.getenv('ADA_DATA_DIR', 'data')

        # LLM settings
        self.llm_base_url = os.getenv('BASE_URL', '')
        self.llm_api_key = os.getenv('API_KEY', '')
        self.classify_model = os.getenv('CLASSIFY_MODEL', 'gpt-4o-mini')
        self.summarize_model = os.getenv('SUMMARIZE_MODEL', 'gpt-4o-mini')
        self.llm_timeout = float(os.getenv('LLM_TIMEOUT', '10.0'))
        self.llm_temperature = float(os.getenv('LLM_TEMPERATURE', '0.1'))
        self.llm_max_retries = int(os.getenv('LLM_MAX_RETRIES', '2'))
        self.llm_max_tokens = int(os.getenv('LLM_MAX_TOKENS', '4096'))

        # Normalize base_url - the OpenAI client appends /chat/completions itself
        if self.llm_base_url:
            self.llm_base_url = self.llm_base_url.rstrip('/')
            if not self.llm_base_url.endswith('/v1'):
                self.llm_base_url = f"{self.llm_base_url}/v1"

        # Content fetching
        self.reader_url = os.getenv('READER_URL', 'https://r.jina.ai').rstrip('/')
        self.reader_timeout = float(os.getenv('READER_TIMEOUT', '8.0'))
        self.max_content_length = int(os.getenv('MAX_CONTENT_LENGTH', '15000'))

        self.max_text_length = int(os.getenv('MAX_TEXT_LENGTH', '10000'))
        self.default_currency = os.getenv('DEFAULT_CURRENCY', 'USD')

        self.reminder_min_lead_seconds = int(os.getenv('REMINDER_MIN_LEAD_SECONDS', '10'))
        self.app_calendar_name = os.getenv('APP_CALENDAR_NAME', 'Ada')
        self.reminder_title = os.getenv('REMINDER_TITLE', 'Ada Reminder')

        self.page_limit = int(os.getenv('PAGE_LIMIT', '50'))

        self.log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.log_file = os.getenv('LOG_FILE', '')

        self._validate()

    @property
    def llm_configured(self) -> bool:
        """True when an LLM endpoint and key are both available"""
        return bool(self.llm_base_url and self.llm_api_key)

    def _validate(self):
        """Validate settings"""
        problems = []

        # The endpoint and key only make sense together
        if self.llm_base_url and not self.llm_api_key:
            problems.append("API_KEY is required when BASE_URL is set")
        if self.llm_api_key and not self.llm_base_url:
            problems.append("BASE_URL is required when API_KEY is set")

        positive = {
            'LLM_TIMEOUT': self.llm_timeout,
            'READER_TIMEOUT': self.reader_timeout,
            'MAX_CONTENT_LENGTH': self.max_content_length,
            'MAX_TEXT_LENGTH': self.max_text_length,
            'PAGE_LIMIT': self.page_limit,
            'LLM_MAX_TOKENS': self.llm_max_tokens,
        }
        problems.extend(f"{key} must be positive" for key, value in positive.items() if value <= 0)

        if self.reminder_min_lead_seconds < 0:
            problems.append("REMINDER_MIN_LEAD_SECONDS must not be negative")
        if self.llm_max_retries < 0:
            problems.append("LLM_MAX_RETRIES must not be negative")

        if problems:
            raise ValueError(
                f"Invalid configuration: {'; '.join(problems)}\n"
                f"Please fix them in .env file or environment variables"
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
