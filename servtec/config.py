"""
ServTec Bot - Configuration Management
"""
from datetime import time
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    # FastAPI
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: str = ""
    supabase_db_password: str = ""
    supabase_db_host: str = ""
    supabase_db_port: int = 6543
    supabase_db_name: str = "postgres"
    supabase_db_user: str = ""

    # Tables
    tickets_table: str = "service_tickets"
    catalog_table: str = "equipment"

    # WhatsApp gateway
    whatsapp_gateway_url: str = "http://localhost:3000"
    whatsapp_api_key: str = ""
    whatsapp_session: str = "default"
    group_chat_id: str = ""
    handler_chat_id: str = ""
    supervisor_chat_id: str = ""
    handler_name: str = "Javier Lopez"

    # Scheduling
    scheduler_enabled: bool = True
    timezone: str = "America/Asuncion"
    reminder_times: str = "08:00,10:00,12:00,14:00,16:00,18:00"
    reminder_weekdays: str = "MO,TU,WE,TH,FR,SA"
    daily_summary_time: str = "18:00"
    heartbeat_interval_seconds: int = 3600

    # Reminder thresholds (hours)
    critical_threshold_hours: float = 2
    normal_threshold_hours: float = 4
    escalation_threshold_hours: float = 6
    sla_hours: float = 24
    reminder_delay_seconds: float = 3.0

    # Intake
    ticket_create_retries: int = 3
    classifier_rules_path: str = ""

    # Authentication
    allowed_api_keys: str = ""  # Comma-separated API keys for admin routes

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def REMINDER_TIMES(self) -> List[time]:
        """Reminder sweep times of day"""
        return [parse_time_of_day(t) for t in self.reminder_times.split(",") if t.strip()]

    @property
    def DAILY_SUMMARY_TIME(self) -> time:
        return parse_time_of_day(self.daily_summary_time)

    @property
    def REMINDER_WEEKDAYS(self) -> List[str]:
        """Business days as two-letter codes (MO..SU)"""
        return [d.strip().upper() for d in self.reminder_weekdays.split(",") if d.strip()]


def parse_time_of_day(value: str) -> time:
    """Parse 'HH:MM' into a time object"""
    hour, _, minute = value.strip().partition(":")
    return time(int(hour), int(minute or 0))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
