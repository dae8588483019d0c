from pydantic import BaseModel
from typing import List
from fixyourcity.reports.schemas import ReportCard, ReportSummary


class Dashboard(BaseModel):
    filter: str
    title: str
    list_title: str
    stats: ReportSummary
    reports: List[ReportCard]
