# app/schemas/report.py
from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

ReportType = Literal["compliance", "maintenance", "costs"]


class DateRange(BaseModel):
    start: date
    end: date

    @model_validator(mode="after")
    def _ordered(self):
        if self.end < self.start:
            raise ValueError("dateRange.end must not be before dateRange.start")
        return self


class ReportSendRequest(BaseModel):
    """Body of POST /reports/send (camelCase on the wire, snake_case in code)."""

    model_config = ConfigDict(populate_by_name=True)

    cron_mode: bool = Field(False, alias="cronMode")
    company_id: Optional[int] = Field(None, alias="companyId")
    user_email: Optional[EmailStr] = Field(None, alias="userEmail")
    date_range: Optional[DateRange] = Field(None, alias="dateRange")
    report_types: Optional[List[ReportType]] = Field(None, alias="reportTypes")
    include_charts: bool = Field(True, alias="includeCharts")
    preview_only: bool = Field(False, alias="previewOnly")

    @model_validator(mode="after")
    def _has_target(self):
        if not self.user_email and self.company_id is None:
            raise ValueError("userEmail or companyId is required")
        return self

