"""
Configuration from environment variables.

Loads .env.local first (local development, highest priority), then .env as
fallback. Values are read once at import time.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
env_local = _project_root / ".env.local"
env_file = _project_root / ".env"

if env_local.exists():
    load_dotenv(env_local, override=True)
elif env_file.exists():
    load_dotenv(env_file, override=True)

# Chunking (sizes in words)
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "500"))
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "50"))
SMART_CHUNK_OVERLAP = int(os.getenv("SMART_CHUNK_OVERLAP", "100"))

# Embeddings
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "vertex_ai")
EMBEDDING_BATCH_SIZE = int(os.getenv("EMBEDDING_BATCH_SIZE", "250"))
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "text-embedding-005")
EMBEDDING_MAX_REQUEST_TOKENS = int(os.getenv("EMBEDDING_MAX_REQUEST_TOKENS", "18000"))
PROJECT_ID = os.getenv("GCP_PROJECT_ID")
LOCATION = os.getenv("GCP_LOCATION", "us-central1")

# Object store
GCS_BUCKET = os.getenv("GCS_BUCKET", "hybrid-rag-documents")

# Vector index
QDRANT_URL = os.getenv("QDRANT_URL", "http://localhost:6333")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY")
QDRANT_COLLECTION = os.getenv("QDRANT_COLLECTION", "documents")

# Hybrid search
DEFAULT_ALPHA = float(os.getenv("DEFAULT_ALPHA", "0.5"))

# Answering
LLM_MODEL = os.getenv("LLM_MODEL", "gemini-2.5-flash")
SIGNED_URL_EXPIRATION = int(os.getenv("SIGNED_URL_EXPIRATION", "3600"))  # Seconds

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
