from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Monitored deployment
    landing_url: str = "https://eryai.tech"
    demo_url: str = "https://ery-ai-demo-restaurang.vercel.app"
    dashboard_url: str = "https://dashboard.eryai.tech"
    sales_url: str = "https://sales.eryai.tech"

    # Supabase (PostgREST over HTTPS, service role key)
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Gemini (probed by the health suite only)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-exp"

    # Resend (alert emails + liveness probe)
    resend_api_key: str = ""
    resend_base_url: str = "https://api.resend.com"
    alert_from: str = "EryAI Monitoring <sofia@eryai.tech>"
    superadmin_email: str = "eric@eryai.tech"

    # Known customer row used by the full test suite
    bella_italia_id: str = "3c6d67d9-22bb-4a3e-94ca-ca552eddb08e"

    # Public URL of this service (links inside alert emails)
    monitor_base_url: str = "https://eryai-monitor.vercel.app"

    # Checks
    default_timeout: float = 10.0
    catalog_path: str = ""  # empty = services.yaml at the project root

    # Daily full test run (UTC hour) when serving
    daily_run_enabled: bool = True
    daily_run_hour: int = 6

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"


settings = Settings()
