# backend/salon/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# .env 에서 덮어쓸 수 있음 (운영 환경에서는 SECRET_KEY 반드시 교체)
SECRET_KEY = os.getenv("SECRET_KEY", "salon-dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# 로그인 사용자 캐시 파일 경로. 비어 있으면 메모리에만 보관
SESSION_STORAGE_PATH = os.getenv("SESSION_STORAGE_PATH") or None

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",")
    if o.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# 카르테 작성 시 선택 가능한 시술 메뉴
SERVICE_MENU_OPTIONS = [
    "痩身施術",
    "ボディマッサージ",
    "リンパドレナージュ",
    "キャビテーション",
    "RF・ラジオ波",
    "EMS",
    "ハイフ",
    "セルライト除去",
    "脂肪燃焼マッサージ",
    "その他",
]

# 체중 기록 기본 조회 기간 (개월)
DEFAULT_MEASUREMENT_WINDOW_MONTHS = 3
