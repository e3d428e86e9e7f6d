import os
from dotenv import load_dotenv

# --- 基础路径配置 ---
BASE_DIR = os.path.abspath(os.path.dirname(__file__))

# 加载同目录下的 .env 文件
load_dotenv(os.path.join(BASE_DIR, '.env'))

# --- Flask 基础配置 ---
FLASK_SECRET_KEY = os.getenv("FLASK_SECRET_KEY", "your_super_secret_key_change_me")

# --- Azure Speech ---
# key 和 region 是必填项，缺失时在创建 gateway 时报错
AZURE_SPEECH_KEY = os.getenv("AZURE_SPEECH_KEY")
AZURE_SPEECH_REGION = os.getenv("AZURE_SPEECH_REGION")
AZURE_SPEECH_OUTPUT_FORMAT = os.getenv("AZURE_SPEECH_OUTPUT_FORMAT", "audio-16khz-128kbitrate-mono-mp3")

# 上游请求超时 (秒)。不设置则不限制
_timeout = os.getenv("AZURE_SPEECH_TIMEOUT")
AZURE_SPEECH_TIMEOUT = float(_timeout) if _timeout else None

# --- 声音目录 ---
FALLBACK_VOICE = os.getenv("FALLBACK_VOICE", "ja-JP-NanamiNeural")
VOICE_CATALOG_FILE = os.getenv("VOICE_CATALOG_FILE")

# --- 日志 ---
LOG_FILE = os.getenv("LOG_FILE", os.path.join(BASE_DIR, "app.log"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# --- CORS Allowed Origins ---
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

# --- 客户端 (tts_console.py) ---
TTS_PROXY_URL = os.getenv("TTS_PROXY_URL", "http://127.0.0.1:5000")
TTS_DEBOUNCE_SECONDS = float(os.getenv("TTS_DEBOUNCE_SECONDS", 3))
TTS_PLAYER_COMMAND = os.getenv("TTS_PLAYER_COMMAND")
