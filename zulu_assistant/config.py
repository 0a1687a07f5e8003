from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./zulu_assistant.db"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # memory | sql
    store_backend: str = "sql"
    session_backend: str = "memory"
    store_timeout_seconds: float = 5.0

    openai_api_key: str = ""
    chat_model: str = "gpt-4o-mini"
    classifier_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 8.0
    classifier_timeout_seconds: float = 4.0

    gallabox_api_key: str = ""
    gallabox_api_secret: str = ""
    gallabox_channel_id: str = ""
    gallabox_base_url: str = "https://server.gallabox.com/devapi"
    send_timeout_seconds: float = 15.0

    categories_csv: str = "categories1.csv"
    galleries_csv: str = "galleries1.csv"
    gallery_base_url: str = "app.zulu.club/"

    employee_numbers: list[str] = ["918368127760", "919717350080", "918860924190"]

    intent_threshold: float = 0.55
    score_exact: int = 100
    score_name_contains_query: int = 50
    score_query_contains_name: int = 30
    score_word_overlap: int = 10
    score_gender: int = 20
    max_categories: int = 3
    max_gallery_links: int = 6

    history_limit: int = 10
    gender_lookback: int = 4
    session_ttl_seconds: int = 60 * 60 * 24
    max_sessions: int = 10000

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
