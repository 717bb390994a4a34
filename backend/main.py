# backend/main.py
# 로컬 실행: python backend/main.py  (또는 uvicorn salon.main:app --reload)
import os

import uvicorn

from salon.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
