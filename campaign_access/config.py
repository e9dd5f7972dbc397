# campaign_access/config.py
import os
from dotenv import load_dotenv

# 프로젝트 루트의 .env 파일이 있으면 환경 변수로 읽어옵니다. (이미 설정된 값은 덮어쓰지 않음)
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///campaigns.db")

# 인증 토큰 유효 시간 (시간 단위)
TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_JSON = os.getenv("LOG_JSON", "false").lower() in ("1", "true", "yes")

HOST = os.getenv("HOST", "")
PORT = int(os.getenv("PORT", "8000"))
