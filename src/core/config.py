from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 앱 설정
    APP_NAME: str = "picup"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # 서버 설정
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # DB 설정
    DATABASE_URL: str = "sqlite:///./picup.db"

    # 이미지 호스팅 (pic.in.th, Chevereto API)
    # 키가 없어도 서버는 뜬다. 업로드 요청만 500으로 거절된다.
    PIC_IN_TH_API_KEY: str | None = None
    HOSTING_API_URL: str = "https://pic.in.th/api/1/upload"

    @property
    def hosting_configured(self) -> bool:
        return bool(self.PIC_IN_TH_API_KEY)

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
