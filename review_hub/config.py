from pathlib import Path

from pydantic_settings import BaseSettings

DEFAULT_FIXTURE_PATH = Path(__file__).parent / "data" / "hostaway_reviews.json"


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    hostaway_account_id: str = ""
    hostaway_api_key: str = ""
    hostaway_api_url: str = "https://api.hostaway.com/v1"
    use_mock_data: bool = False
    credential_store: str = "memory"  # "memory" | "supabase"
    supabase_url: str = ""
    supabase_anon_key: str = ""
    request_timeout: float = 10.0
    fixture_path: Path = DEFAULT_FIXTURE_PATH
    log_level: str = "INFO"

    @property
    def mock_mode(self) -> bool:
        # Missing client identity/secret forces mock mode regardless of the toggle
        return self.use_mock_data or not self.hostaway_account_id or not self.hostaway_api_key
