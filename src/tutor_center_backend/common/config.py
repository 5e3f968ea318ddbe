'''
Holds all the configurations
'''
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Manages application configuration using environment variables.
    """
    # Application Metadata
    APP_NAME: str = "Tutor Center Backend"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Roster, check-in, class scheduling and invoicing API for a tutoring center."
    TEST_MODE: bool = False

    # Database URL
    DATABASE_URL_PROD: str = "sqlite+aiosqlite:///./tutor_center.db"
    DATABASE_URL_TEST: str = "sqlite+aiosqlite:///:memory:"
    AUTO_CREATE_TABLES: bool = True
    @property
    def database_url(self) -> str:
        """
        Dynamically returns the correct database URL based on the test_mode flag.
        """
        if self.TEST_MODE:
            return self.DATABASE_URL_TEST
        return self.DATABASE_URL_PROD

    # Calendar / check-in dates are all resolved in this zone
    TIMEZONE: str = "UTC"

    # Invoice settings
    CURRENCY_SYMBOL: str = "$"
    INVOICE_CLASS_LABEL: str = "English"
    INVOICE_TEACHER_LABEL: str = "Ken"

    # Extra frontend origins
    BACKEND_CORS_ORIGINS: list[str] = []

    class Config:
        env_file = ".env" # automatically loads the .env

# Create a single, importable instance of the settings
settings = Settings()
