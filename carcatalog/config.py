"""Configuration: env, catalog API, blob store, upload cache."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Base paths (project root = parent of carcatalog package)
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env from project root so CATALOG_API_BASE_URL, MINIO_* etc. are set
load_dotenv(BASE_DIR / ".env")

DATA_DIR = Path(os.getenv("CATALOG_DATA_DIR", str(BASE_DIR / "data")))
UPLOAD_CACHE_PATH = DATA_DIR / "image_uploads.json"
BACKEND_STORE_PATH = Path(os.getenv("CATALOG_BACKEND_STORE", str(DATA_DIR / "cars.json")))

# Remote catalog API
CATALOG_API_BASE_URL = os.getenv("CATALOG_API_BASE_URL", "http://localhost:8000/")
CATALOG_RESOURCE = os.getenv("CATALOG_RESOURCE", "car")
CATALOG_HTTP_TIMEOUT = float(os.getenv("CATALOG_HTTP_TIMEOUT", "15"))
CATALOG_API_TOKEN = os.getenv("CATALOG_API_TOKEN", "")
USER_AGENT = "carcatalog/0.1"

# Blob store (MinIO / S3-compatible)
MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "http://localhost:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "car-catalog")
# Public URL prefix photos are served from; defaults to the endpoint itself
MINIO_PUBLIC_URL = os.getenv("MINIO_PUBLIC_URL", MINIO_ENDPOINT)
IMAGE_FOLDER = "car_images"
IMAGE_SUFFIX = ".jpg"

# Extra URL prefixes treated as "already in the store" (comma-separated)
STORE_URL_PREFIXES = tuple(
    p.strip() for p in os.getenv("CATALOG_STORE_URL_PREFIXES", "").split(",") if p.strip()
)

# Per-hash upload lock (off by default: concurrent identical uploads may duplicate)
UPLOAD_LOCK_PER_HASH = os.getenv("CATALOG_UPLOAD_LOCK_PER_HASH", "0").lower() in ("1", "true", "yes")

# Background mutation workers
MUTATION_WORKERS = int(os.getenv("CATALOG_MUTATION_WORKERS", "4"))

# Development backend
API_HOST = os.getenv("CATALOG_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("CATALOG_API_PORT", "8000"))


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
