from enum import Enum

from pydantic import BaseModel, Field, computed_field

from app.models.address import ResolvedAddress


class EstimateRequest(BaseModel):
    address: str = Field("", description="Free-text address or postal code")


class HouseEstimate(BaseModel):
    size: int
    windows: int
    style: str | None = None
    size_range: str | None = None
    policy: str


class EnergyUsage(BaseModel):
    monthly: float
    source: str
    fallback: bool = False
    temperature_c: float | None = None
    humidity_pct: float | None = None
    wind_kph: float | None = None

    @computed_field
    @property
    def annual(self) -> float:
        return self.monthly * 12


class EstimateResult(BaseModel):
    address: ResolvedAddress
    house: HouseEstimate
    usage: EnergyUsage


class ViewState(str, Enum):
    loading = "loading"
    results = "results"
    error = "error"


class EstimateView(BaseModel):
    state: ViewState
    full_address: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = None
    house_size: str | None = None
    size_range: str | None = None
    window_count: str | None = None
    energy_usage: str | None = None
    annual_usage: str | None = None
    weather: str | None = None
    message: str | None = None


class EstimateResponse(BaseModel):
    address: ResolvedAddress
    house: HouseEstimate
    usage: EnergyUsage
    view: EstimateView
