"""Runtime configuration read from environment variables."""

import os

# MongoDB
MONGODB_URL = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
MONGODB_DB_NAME = os.getenv("MONGODB_DB_NAME", "notehub")
INIT_DB = os.getenv("INIT_DB", "true").lower() == "true"
# Multi-document transactions need a replica set; disable for standalone servers
MONGODB_TRANSACTIONS = os.getenv("MONGODB_TRANSACTIONS", "true").lower() == "true"

# JWT Configuration
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "your-secret-key-here-change-in-production")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRATION_DAYS = int(os.getenv("JWT_EXPIRATION_DAYS", "30"))

# Server
HOST = os.getenv("NOTEHUB_HOST", "0.0.0.0")
PORT = int(os.getenv("NOTEHUB_PORT", "8000"))
