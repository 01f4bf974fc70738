from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, Field

CrowdingStatus = Literal["idle", "loading", "success", "error"]
SectionStatus = Literal["idle", "loading", "success", "error"]


class ApiErrorPayload(BaseModel):
    code: str
    message: str
    degraded: bool | None = None
    degraded_reason: str | None = None
    trace_id: str | None = None


class StockAnomaly(BaseModel):
    name: str
    pct_change: float
    amount: float

    @property
    def amount_hundred_million(self) -> float:
        return self.amount / 1e8

    @property
    def label(self) -> str:
        return f"{self.name}（{self.pct_change:.2f}%，{self.amount_hundred_million:.2f}亿元）"


class DailySnapshot(BaseModel):
    date: str
    industries: dict[str, list[StockAnomaly]]


class IndustryAggregate(BaseModel):
    industry: str
    stocks: list[StockAnomaly]
    rows: list[list[StockAnomaly]]
    count: int
    avg_change_pct: float
    total_amount_hundred_million: float

    @property
    def summary_label(self) -> str:
        return (
            f"{self.industry} {self.count}，{self.avg_change_pct:.2f}%，"
            f"{self.total_amount_hundred_million:.2f}亿元"
        )


class RankedDaily(BaseModel):
    date: str
    top_industries: list[IndustryAggregate] = Field(max_length=5)


class IndexPoint(BaseModel):
    trade_date: str = Field(validation_alias=AliasChoices("tradeDate", "trade_date"))
    close: float
    amount: float
    pct_change: float = Field(validation_alias=AliasChoices("pctChange", "pct_change"))


class LatestIndexSummary(BaseModel):
    trade_date: str
    pct_change: float
    amount_hundred_million: float


class IndexSeries(BaseModel):
    dates: list[str]
    close_series: list[float]
    amount_series: list[float]
    bar_colors: list[str]
    latest: IndexPoint | None = None
    latest_summary: LatestIndexSummary | None = None


class CrowdingSeries(BaseModel):
    dates: list[str]
    series: dict[str, list[float]]
    colors: dict[str, str]


class CrowdingRequestState(BaseModel):
    status: CrowdingStatus = "idle"
    data: CrowdingSeries | None = None
    error: str | None = None
    industries: list[str] = Field(default_factory=list)
    generation: int = 0


class CrowdingRequest(BaseModel):
    date: str = Field(min_length=8, max_length=32)
    industries: list[str] | None = None
    wait: bool = False


class IndustrySelection(BaseModel):
    industries: list[str]


class IndexSection(BaseModel):
    status: SectionStatus = "idle"
    error: str | None = None
    data: IndexSeries | None = None


class AnomalySection(BaseModel):
    status: SectionStatus = "idle"
    error: str | None = None
    rise: int
    data: list[RankedDaily] = Field(default_factory=list)


class DashboardView(BaseModel):
    index: IndexSection
    anomalies: AnomalySection
    industry_options: list[str]
    selected_industries: list[str]
    crowding: dict[str, CrowdingRequestState]


class AppConfig(BaseModel):
    api_base_url: str = "http://127.0.0.1:8000/stock/api"
    industry_list_path: str = "/industry-list/"
    wind_info_path: str = "/wind-info/"
    big_rise_volume_path: str = "/big-rise-volume/"
    trading_crowding_path: str = "/trading-crowding/"
    request_timeout_sec: float = 15.0
    default_rise: int = 8
    crowding_discard_stale: bool = True
    log_level: str = "INFO"
