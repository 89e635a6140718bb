from __future__ import annotations
import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./bookstore.db")
FRONTEND_ORIGIN = os.getenv("FRONTEND_ORIGIN", "*")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Embedding provider: "huggingface" (default), "openai" or "fastembed" (local, no API key)
EMBED_PROVIDER = os.getenv("EMBED_PROVIDER", "huggingface").lower()

HUGGINGFACE_API_KEY = os.getenv("HUGGINGFACE_API_KEY", "")
HF_EMBED_MODEL = os.getenv("HF_EMBED_MODEL", "BAAI/bge-small-en-v1.5")
HF_API_BASE = os.getenv("HF_API_BASE", "https://api-inference.huggingface.co/models")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
OPENAI_EMBED_MODEL = os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small")
OPENAI_API_URL = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/embeddings")

EMBED_MODEL = os.getenv("EMBED_MODEL", "BAAI/bge-small-en-v1.5")

# 503 "model loading" retry policy: 3 attempts, waits of 3s then 6s
EMBED_MAX_ATTEMPTS = int(os.getenv("EMBED_MAX_ATTEMPTS", "3"))
EMBED_BACKOFF_SECONDS = float(os.getenv("EMBED_BACKOFF_SECONDS", "3"))
EMBED_CONNECT_TIMEOUT = float(os.getenv("EMBED_CONNECT_TIMEOUT", "10"))
EMBED_REQUEST_TIMEOUT = float(os.getenv("EMBED_REQUEST_TIMEOUT", "30"))

SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "true").lower() == "true"
