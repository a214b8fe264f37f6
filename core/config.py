"""
配置文件 - 项目配置管理
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class GrpcTlsSettings(BaseModel):
    enabled: bool = False
    cert: Optional[str] = None
    key: Optional[str] = None
    ca: Optional[str] = None


class GrpcSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 50051
    # This maps to GRPC option grpc.max_concurrent_streams
    max_concurrent_streams: int = 100
    # Seconds in-flight RPCs get to finish on shutdown; None cancels them at once
    shutdown_grace: Optional[float] = None
    tls: GrpcTlsSettings = Field(default_factory=GrpcTlsSettings)


class MongoSettings(BaseModel):
    url: str = "mongodb://localhost:27017"
    database: str = "mydb"
    collection: str = "records"
    server_selection_timeout_ms: int = 5000
    app_name: str = "record-service"

    @field_validator("database", "collection")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class Settings(BaseSettings):
    """项目配置"""

    # 基础配置
    PROJECT_NAME: str = Field(default="Record Service")
    VERSION: str = Field(default="1.0.0")
    DEBUG: bool = Field(default=True)
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: Optional[str] = Field(default=None, description="Overrides the DEBUG-derived level")

    # 分组配置：gRPC/Mongo 采用嵌套模型（GRPC__PORT, MONGO__URL ...）
    grpc: GrpcSettings = Field(default_factory=GrpcSettings)
    mongo: MongoSettings = Field(default_factory=MongoSettings)

    # pydantic-settings v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _normalize_log_level(cls, v):
        if v is None or v == "":
            return None
        level = str(v).strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


settings = Settings()
