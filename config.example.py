# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file),
see src/agent_architect/config.py. Do NOT commit real secrets; keep them in .env (gitignored).
"""

ENV_VARS = {
    # App / logging
    "ARCHITECT_APP_NAME": "App display name (default: architect).",
    "ARCHITECT_LOG_LEVEL": "Console logging level (default: INFO).",
    # Execution
    "ARCHITECT_STEP_DELAY_SECONDS": "Pause between scheduler steps in seconds (default: 1.0).",
    # LLM / OpenRouter
    "ARCHITECT_OFFLINE": "Use the built-in offline demo client instead of OpenRouter (true/false).",
    "ARCHITECT_OPENROUTER_API_KEY": "OpenRouter API key (falls back to OPENROUTER_API_KEY).",
    "ARCHITECT_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "ARCHITECT_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "ARCHITECT_LLM_TEMPERATURE": "Sampling temperature (default: 0.7).",
    "ARCHITECT_LLM_CONNECT_TIMEOUT_SECONDS": "LLM connect timeout (default: 5).",
    "ARCHITECT_LLM_READ_TIMEOUT_SECONDS": "LLM read timeout, never below the first-token timeout (default: 60).",
    "ARCHITECT_LLM_FIRST_TOKEN_TIMEOUT_SECONDS": "Give up on a model that sends no content for this long (default: 45).",
    "ARCHITECT_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "ARCHITECT_APP_TITLE": "Optional OpenRouter metadata header title.",
    # Paths (gitignored)
    "ARCHITECT_DATA_DIR": "Local data directory (default: .local/architect).",
    "ARCHITECT_ARTIFACTS_DB_PATH": "Artifact SQLite path (default: <data_dir>/artifacts.sqlite3).",
    "ARCHITECT_EXPORT_DIR": "Where /export writes ZIP archives (default: <data_dir>/exports).",
}
