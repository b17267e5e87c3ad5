from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    APP_NAME: str = "Body Metrics Calculators"
    DATABASE_URL: str = "sqlite:///data/calculators.db"
    DATA_DIR: Path = Path("data")
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:8050",
        "http://127.0.0.1:5173",
    ]
    BMI_STORAGE_KEY: str = "bmiCalculatorState_v2"
    TDEE_STORAGE_KEY: str = "tdeeCalculatorState"
    DEFAULT_LOCALE: str = "en"
    SUPPORTED_LOCALES: list[str] = ["en", "fr"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def validate_configuration(self) -> None:
        errors: list[str] = []
        if self.BMI_STORAGE_KEY.strip() == self.TDEE_STORAGE_KEY.strip():
            errors.append("BMI_STORAGE_KEY and TDEE_STORAGE_KEY must be distinct")
        if not self.BMI_STORAGE_KEY.strip() or not self.TDEE_STORAGE_KEY.strip():
            errors.append("storage keys must not be empty")
        if self.DEFAULT_LOCALE not in self.SUPPORTED_LOCALES:
            errors.append(f"DEFAULT_LOCALE {self.DEFAULT_LOCALE!r} is not in SUPPORTED_LOCALES")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Invalid configuration: {joined}")


settings = Settings()
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
