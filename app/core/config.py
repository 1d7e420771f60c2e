# app/core/config.py
import os
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    PROJECT_NAME: str = "Room Insight Dashboard"
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CSV 上传
    # utf-8-sig 会自动去掉 Excel 导出文件开头的 BOM
    CSV_ENCODING: str = os.getenv("CSV_ENCODING", "utf-8-sig")
    CSV_DELIMITER: str = os.getenv("CSV_DELIMITER", ",")
    # 单个上传文件的大小上限（字节），数据全部放在内存里
    UPLOAD_MAX_BYTES: int = int(os.getenv("UPLOAD_MAX_BYTES", str(50 * 1024 * 1024)))

    class Config:
        env_file = ".env"


settings = Settings()
