from pathlib import Path

from pydantic_settings import BaseSettings

# .env 파일 탐색: backend/.env → 프로젝트 루트/.env
_backend_dir = Path(__file__).resolve().parent.parent
_env_candidates = [_backend_dir / ".env", _backend_dir.parent / ".env"]
_env_file = next((p for p in _env_candidates if p.exists()), ".env")


class Settings(BaseSettings):
    model_config = {"env_file": str(_env_file), "env_file_encoding": "utf-8", "extra": "ignore"}

    # Application
    app_env: str = "development"
    debug: bool = True

    # 국토교통부 실거래가 API
    molit_api_key: str = ""

    # 통계청 KOSIS API (미분양, 착공실적)
    kosis_api_key: str = ""

    # Naver Cloud Maps API (지오코딩)
    naver_client_id: str = ""
    naver_client_secret: str = ""

    # 외부 API 호출 제한
    api_timeout: float = 10.0
    max_concurrency: int = 10

    # Cache (초 단위)
    cache_ttl: int = 3600
    cache_sweep_interval: int = 720

    # 분석 파이프라인
    trailing_months: int = 3
    top_n: int = 10

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origin: str = "http://localhost:3000"


settings = Settings()
