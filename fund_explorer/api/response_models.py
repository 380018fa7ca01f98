"""
Pydantic response schemas for the API.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    rows: int
    profiles: dict[str, int]
    errors: dict[str, str]


class ProfileInfo(BaseModel):
    value: str
    label: str
    loaded: bool
    rows: int


class ProfilesResponse(BaseModel):
    profiles: list[ProfileInfo]


class CategoriesResponse(BaseModel):
    dataSource: str
    categories: list[str]


class FundModel(BaseModel):
    isin: str
    name: str
    currency: str
    category: str
    subcategory: str
    management_company: str
    compartment_code: str
    aum: str
    available_for_implicit_advisory: bool
    available_for_explicit_advisory: bool
    hedge: str
    management_fee: float
    success_fee: float
    min_investment: float
    min_investment_currency: str
    ytd_return: float
    one_year_return: float
    three_year_return: float
    five_year_return: float
    factsheet_url: str
    kiid_url: str
    risk_level: str
    morningstar_rating: int
    focus_list: str
    rating: str
    maturity_range: str
    dividend_policy: str
    replication_type: str
    req: str


class FilterCountsModel(BaseModel):
    categories: dict[str, int]
    riskLevels: dict[str, int]
    currencies: Optional[dict[str, int]] = None
    focusList: dict[str, int]
    implicitAdvisory: Optional[dict[str, int]] = None
    explicitAdvisory: Optional[dict[str, int]] = None
    hedge: Optional[dict[str, int]] = None
    dividendPolicy: dict[str, int]
    replicationType: Optional[dict[str, int]] = None


class FundsResponse(BaseModel):
    funds: list[FundModel]
    total: int
    page: int
    totalPages: int
    limit: int
    counts: Optional[FilterCountsModel] = None


class UploadResult(BaseModel):
    file: str
    rows: int
    profile: Optional[str] = None
    sheet: Optional[str] = None


class UploadResponse(BaseModel):
    status: str
    files: list[UploadResult]
    reloaded: dict[str, int]
    errors: dict[str, str]
