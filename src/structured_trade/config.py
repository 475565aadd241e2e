"""配置加载模块 - 从环境变量和 .env 文件加载配置。"""

from enum import Enum
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedKind(str, Enum):
    """价格源枚举。"""

    RANDOM = "random"  # 随机游走模拟
    BINANCE = "binance"  # Binance 期货行情


class LogFormat(str, Enum):
    """日志格式枚举。"""

    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    """系统配置设置。

    从环境变量和 .env 文件加载配置。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== 行情 ====================
    symbol: str = Field(default="BTCUSDT", description="交易标的")
    feed: FeedKind = Field(default=FeedKind.RANDOM, description="价格源: random 或 binance")
    initial_price: float = Field(default=64_230.50, gt=0, description="模拟起始价格")
    initial_change_pct: float = Field(default=2.45, description="模拟起始 24h 涨跌幅（百分比）")
    random_walk_step: float = Field(
        default=50.0,
        gt=0,
        le=10_000.0,
        description="随机游走单次最大波动幅度",
    )
    tick_interval_sec: float = Field(
        default=2.0,
        ge=0.0,
        le=3600.0,
        description="价格跳动间隔（秒）",
    )

    # ==================== Binance API ====================
    binance_api_key: str = Field(default="", description="Binance API Key")
    binance_api_secret: str = Field(default="", description="Binance API Secret")
    binance_testnet: bool = Field(default=True, description="是否使用 Binance 测试网")

    # ==================== 下单参数 ====================
    available_balance: float = Field(
        default=10_000.0,
        ge=0.0,
        description="可用余额（只读，纸交易）",
    )
    default_risk_level: int = Field(
        default=20,
        ge=0,
        le=100,
        description="默认难度（风险等级）",
    )
    default_stake: float = Field(default=1_000.0, gt=0, description="默认下注金额")
    contract_window_hours: int = Field(
        default=24,
        ge=1,
        le=168,
        description="合约展示窗口（小时），仅用于倒计时展示",
    )

    # ==================== 日志配置 ====================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="日志级别",
    )
    log_format: LogFormat = Field(
        default=LogFormat.CONSOLE,
        description="日志输出格式",
    )

    @field_validator("symbol", mode="before")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """统一为大写标的名。"""
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def is_live_feed(self) -> bool:
        """是否使用真实行情。"""
        return self.feed == FeedKind.BINANCE

    def validate_for_live_feed(self) -> list[str]:
        """验证真实行情的必要配置，返回缺失项列表。"""
        missing = []
        if not self.symbol.strip():
            missing.append("SYMBOL")
        if self.symbol and not self.symbol.isalnum():
            missing.append("SYMBOL (alphanumeric, e.g. BTCUSDT)")
        return missing


# 全局配置实例（延迟初始化）
_settings: Settings | None = None


def get_settings() -> Settings:
    """获取全局配置实例。"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """重新加载配置。"""
    global _settings
    _settings = Settings()
    return _settings
