from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenAI-compatible endpoint; defaults to Gemini's compatibility layer
    api_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_model: str = "gemini-2.5-flash"
    temperature: float = 0.8
    request_timeout: float = 120.0

    database_path: str = "roteirista.db"

    # Storage keys
    history_key: str = "roteiristaBiblicoHistory"
    api_key_key: str = "geminiApiKey"
    persist_pref_key: str = "saveGeminiApiKeyPref"

    # Oldest records are evicted past this many
    history_max_records: int = 200

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
