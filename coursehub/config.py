from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_path: str = "coursehub.db"
    busy_timeout_ms: int = 5000

    # Logging
    log_level: str = "INFO"

    # Student roster placeholders (no backing storage yet)
    student_role: str = "student"
    placeholder_course_id: str = "1"
    struggling_topic: str = "React Hooks"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
