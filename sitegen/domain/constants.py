from pathlib import Path

# Result storage
DEFAULT_RESULTS_ROOT = Path(".sitegen/results")
FRAGMENT_FILENAME = "fragment.json"
FRAGMENT_TEMP_SUFFIX = ".json.tmp"
RESULT_FILES_DIRNAME = "files"

# Config
CONFIG_DIRNAME = ".sitegen"
CONFIG_FILENAME = "config.yml"

# Transport defaults
DEFAULT_CONNECT_TIMEOUT = 10.0  # seconds
DEFAULT_RESPONSE_TIMEOUT = 300.0  # 5 minutes
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4000

# Built-in gateway catalog, in declared order.
BUILTIN_PROVIDERS: list[dict[str, object]] = [
    {
        "name": "openrouter",
        "weight": 0.4,
        "credential_ref": "OPENROUTER_API_KEY",
        "auth_header_name": "Authorization",
        "base_url": "https://openrouter.ai/api/v1",
        "default_model": "x-ai/grok-4.1-fast:free",
    },
    {
        "name": "routeway",
        "weight": 0.3,
        "credential_ref": "ROUTEWAY_API_KEY",
        "auth_header_name": "Authorization",
        "base_url": "https://api.routeway.ai/v1",
        "default_model": "kimi-k2-0905:free",
    },
    {
        "name": "megallm",
        "weight": 0.2,
        "credential_ref": "MEGALLM_API_KEY",
        "auth_header_name": "Authorization",
        "base_url": "https://ai.megallm.io/v1",
        "default_model": "llama3-8b-instruct",
    },
    {
        "name": "agentrouter",
        "weight": 0.1,
        "credential_ref": "AGENTROUTER_API_KEY",
        "auth_header_name": "X-API-Key",
        "base_url": "https://agentrouter.org/v1",
        "default_model": "deepseek-v3.1",
    },
]
