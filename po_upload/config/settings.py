from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    mistral_api_key: str = ""
    mistral_base_url: str = "https://api.mistral.ai/v1"
    mistral_ocr_model: str = "mistral-ocr-latest"
    mistral_include_image_base64: bool = True
    provider_timeout_seconds: int = 60

    extraction_provider: str = "openai"

    openai_api_key: str = ""
    openai_model_name: str = "gpt-4.1-mini"
    openai_temperature: float = 0.1
    openai_timeout_seconds: int = 30

    openai_compatible_base_url: str = ""
    openai_compatible_api_key: str = ""
    openai_compatible_model_name: str = ""

    supabase_url: str = ""
    supabase_anon_key: str = ""
    storage_bucket: str = "purchase-orders"
    storage_cache_control: str = "3600"

    session_cookie_name: str = "po-upload-session"
    upload_path: str = "/upload"
    sign_in_path: str = "/auth"

    proxy_base_url: str = "http://localhost:8000"
    signed_url_expiry_hours: int = 24

    po_persistence_enabled: bool = False
    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "po_upload"
    db_username: str = "po_upload"
    db_password: str = "secret"
