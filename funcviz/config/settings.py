import os
from dotenv import load_dotenv

# --- Project paths ---
FUNCVIZ_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Expect .env one level ABOVE the package (the project root)
ENV_PATH = os.path.join(os.path.dirname(FUNCVIZ_DIR), ".env")
load_dotenv(dotenv_path=ENV_PATH)

# --- small helpers for env parsing ---
def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


# --- Logging Configuration ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")  # options: DEBUG, INFO, WARNING, ERROR

# --- AI expression generation ---
# Which backend generate_expression() uses when no generator is injected: "groq" | "gemini"
AI_PROVIDER = os.getenv("AI_PROVIDER", "groq")

GROQ_API_KEY = os.getenv("GROQ_API_KEY")
GROQ_API_URL = os.getenv("GROQ_API_URL", "https://api.groq.com/openai/v1/chat/completions")
GROQ_MODEL_NAME = os.getenv("GROQ_MODEL_NAME", "llama3-70b-8192")

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
GEMINI_MODEL_NAME = os.getenv("GEMINI_MODEL_NAME", "gemini-1.5-flash")

# One attempt only; on timeout the fallback expression is used
AI_REQUEST_TIMEOUT = _env_float("AI_REQUEST_TIMEOUT", 10.0)  # seconds
AI_TEMPERATURE = _env_float("AI_TEMPERATURE", 0.7)
AI_MAX_TOKENS = _env_int("AI_MAX_TOKENS", 100)

# --- Sampling defaults ---
DEFAULT_RESOLUTION = _env_int("DEFAULT_RESOLUTION", 200)   # 2D steps (n+1 samples)
RESOLUTION_MIN = 50
RESOLUTION_MAX = 500

DEFAULT_GRID_SIZE = _env_int("DEFAULT_GRID_SIZE", 30)      # 3D lattice is (g+1) x (g+1)
GRID_SIZE_MIN = 10
GRID_SIZE_MAX = 100

DEFAULT_RANGE_MIN = _env_float("DEFAULT_RANGE_MIN", -10.0)
DEFAULT_RANGE_MAX = _env_float("DEFAULT_RANGE_MAX", 10.0)

# --- Rendering ---
RENDER_DPI = _env_int("RENDER_DPI", 120)
SHOW_GRID = _env_bool("SHOW_GRID", True)

if __name__ == "__main__":
    # Quick sanity check
    print(f"funcviz package directory: {FUNCVIZ_DIR}")
    print(f"Looking for .env at: {ENV_PATH}")
    print(f"AI provider: {AI_PROVIDER}")
    print(f"Groq API Key Loaded: {'Yes' if GROQ_API_KEY else 'No'}")
    print(f"Google API Key Loaded: {'Yes' if GOOGLE_API_KEY else 'No'}")
    print(f"AI request timeout: {AI_REQUEST_TIMEOUT}s")
    print(f"Default resolution: {DEFAULT_RESOLUTION} ({RESOLUTION_MIN}-{RESOLUTION_MAX})")
    print(f"Default grid size: {DEFAULT_GRID_SIZE} ({GRID_SIZE_MIN}-{GRID_SIZE_MAX})")
    print(f"Log level: {LOG_LEVEL}")
