import os
from dotenv import load_dotenv

load_dotenv()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "test")
COLLECTION_NAME = os.getenv("COLLECTION_NAME", "testreactive")

# ---- Demo workload ----
PERSON_COUNT = int(os.getenv("PERSON_COUNT", "1000"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "20"))

# Comma-separated wire compressors; pymongo skips (with a warning) any
# compressor whose module is not installed, e.g. snappy without python-snappy.
MONGO_COMPRESSORS = os.getenv("MONGO_COMPRESSORS", "snappy,zlib")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
