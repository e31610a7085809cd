from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Notion (page search, metadata and content)
    notion_api_key: str = ""
    notion_base_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_timeout_seconds: float = 30.0
    notion_page_size: int = 100

    # OpenRouter (text completion)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "google/gemini-flash-1.5"
    openrouter_model: str = ""  # optional override of default_model
    llm_temperature: float = 0.3
    llm_max_tokens: int = 2048

    # Search pipeline limits
    search_max_keywords: int = 3
    search_max_results: int = 30
    search_max_selected_pages: int = 3
    search_max_depth: int = 3
    search_delay_ms: int = 350  # between keywords and between fetched pages
    search_query_suffixes: list[str] = ["project", "plan"]
    synthesis_context_char_budget: int = 45000

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]


settings = Settings()
