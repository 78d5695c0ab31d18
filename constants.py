import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 5000))
RELOAD = os.getenv("RELOAD", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

VIDEO_DIR = os.getenv("VIDEO_DIR", os.path.join(os.getcwd(), "videos"))
VIDEO_URL_PREFIX = "/videos"
ALLOWED_VIDEO_EXTENSIONS = (".mp4", ".webm", ".ogg", ".wmv", ".mkv")

ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]
