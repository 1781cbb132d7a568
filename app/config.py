from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    db_name: str = "race_results_db"
    db_user: str = "postgres"
    db_password: str = ""
    db_host: str = "localhost"
    db_port: str = "5432"
    database_url: str = ""  # Full async URL override, e.g. sqlite+aiosqlite:///./local.db

    # Frontend base URL used for checkout redirects
    app_url: str = "http://localhost:3000"

    # Environment
    env: str = "development"
    debug: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
