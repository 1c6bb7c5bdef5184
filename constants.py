import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

SYNC_STRATEGY = os.getenv("SYNC_STRATEGY", "targeted")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
