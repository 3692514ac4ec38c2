import os
from dotenv import load_dotenv

load_dotenv()

# Personal access token: Figma → Settings → Account → Personal Access Tokens
FIGMA_TOKEN = os.getenv("FIGMA_TOKEN") or os.getenv("FIGMA_API_KEY")
FIGMA_API_BASE = os.getenv("FIGMA_API_BASE", "https://api.figma.com/v1").rstrip("/")
FIGMA_TIMEOUT = float(os.getenv("FIGMA_TIMEOUT", "30"))

# Compressor depth cap; deeper nodes are dropped
MAX_DEPTH = int(os.getenv("MAX_DEPTH", "20"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
