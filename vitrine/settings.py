import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() == "true"

# Simple float loader with bounds and default
def _env_float(name: str, default: float, min_val: float = 0.0, max_val: float = 1.0) -> float:
    try:
        val = float(os.getenv(name, str(default)))
    except Exception:
        return default
    return max(min_val, min(max_val, val))


def _env_int(name: str, default: int, min_val: int = 1) -> int:
    try:
        val = int(os.getenv(name, str(default)))
    except Exception:
        return default
    return max(min_val, val)


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


LOG_LEVEL = _env_str("LOG_LEVEL", "INFO").upper()

# Provedor de geracao: "groq" (nuvem) ou "ollama" (local)
LLM_PROVIDER = _env_str("LLM_PROVIDER", "groq").lower()
GROQ_API_KEY = _env_str("GROQ_API_KEY")
GROQ_MODEL = _env_str("GROQ_MODEL", "llama-3.3-70b-versatile")
OLLAMA_BASE_URL = _env_str("OLLAMA_BASE_URL", "http://127.0.0.1:11434")
OLLAMA_MODEL = _env_str("OLLAMA_MODEL", "gemma:7b")
GENERATION_TIMEOUT_SECONDS = _env_float("GENERATION_TIMEOUT_SECONDS", default=20.0, min_val=1.0, max_val=120.0)

# "rules" | "llm" | "hybrid"
INTENT_STRATEGY = _env_str("INTENT_STRATEGY", "hybrid").lower()

# Confidence gate do classificador (abaixo disso tenta resgate fuzzy)
MIN_INTENT_CONFIDENCE = _env_float("MIN_INTENT_CONFIDENCE", default=0.6)
# Confianca atribuida quando o resgate fuzzy encontra uma categoria
FUZZY_RESCUE_CONFIDENCE = _env_float("FUZZY_RESCUE_CONFIDENCE", default=0.75)

# Similaridade minima (0-100) por nivel da taxonomia
CATEGORY_MATCH_THRESHOLD = _env_float("CATEGORY_MATCH_THRESHOLD", default=60.0, max_val=100.0)
SUBCATEGORY_MATCH_THRESHOLD = _env_float("SUBCATEGORY_MATCH_THRESHOLD", default=50.0, max_val=100.0)
PRODUCT_MATCH_THRESHOLD = _env_float("PRODUCT_MATCH_THRESHOLD", default=60.0, max_val=100.0)

PRODUCT_CANDIDATE_LIMIT = _env_int("PRODUCT_CANDIDATE_LIMIT", default=200)
PRODUCT_LIST_LIMIT = _env_int("PRODUCT_LIST_LIMIT", default=100)
MIN_GENERATED_REPLY_LENGTH = _env_int("MIN_GENERATED_REPLY_LENGTH", default=5)

# Reescrita "humana" das respostas de template (desligada por padrao)
HUMANIZE_REPLIES_ENABLED = _env_bool("HUMANIZE_REPLIES_ENABLED", default=False)

# "memory" | "database"
SESSION_BACKEND = _env_str("SESSION_BACKEND", "memory").lower()

WHATSAPP_VERIFY_TOKEN = _env_str("WHATSAPP_VERIFY_TOKEN", "meuTokenSecreto123")
WHATSAPP_ACCESS_TOKEN = _env_str("WHATSAPP_ACCESS_TOKEN")
WHATSAPP_PHONE_NUMBER_ID = _env_str("WHATSAPP_PHONE_NUMBER_ID")
WHATSAPP_API_VERSION = _env_str("WHATSAPP_API_VERSION", "v19.0")

# Log estruturado de decisoes (vazio = desligado)
INTELLIGENCE_LOG_PATH = os.getenv("INTELLIGENCE_LOG_PATH", "intelligence.log").strip()
