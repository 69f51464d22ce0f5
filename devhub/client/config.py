from pathlib import Path

from pydantic_settings import BaseSettings


class ClientSettings(BaseSettings):
    """Dashboard client settings, read from DEVHUB_* environment variables."""

    api_url: str = "http://localhost:8000"
    request_timeout: int = 10

    # Local files
    cache_path: Path = Path.home() / ".cache" / "devhub" / "compounds.json"
    download_dir: Path = Path.home() / "Downloads"
    chart_path: Path = Path("pka_energy_chart.png")

    # Seconds of input inactivity before a filter change reloads the list
    debounce_seconds: float = 0.3

    class Config:
        env_prefix = "DEVHUB_"
        env_file = ".env"
        extra = "ignore"


client_settings = ClientSettings()
