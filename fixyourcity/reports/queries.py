"""
Read-only views over a snapshot of reports: filtering, sorting and the
display hints each page needs. Nothing here touches a store.
"""

from typing import Dict, Iterable, List, Union

from fixyourcity.reports.schemas import Report, ReportCard, ReportStatus, ReportSummary, StyleToken

ALL_REPORTS = "All Reports"

_STYLE_TAGS: Dict[ReportStatus, StyleToken] = {
    ReportStatus.PENDING: StyleToken.ALERT,
    ReportStatus.IN_PROGRESS: StyleToken.WARN,
    ReportStatus.RESOLVED: StyleToken.OK,
}

_AUTHORITY_ACTIONS: Dict[ReportStatus, List[ReportStatus]] = {
    ReportStatus.PENDING: [ReportStatus.IN_PROGRESS, ReportStatus.RESOLVED],
    ReportStatus.IN_PROGRESS: [ReportStatus.RESOLVED],
    ReportStatus.RESOLVED: [],
}

_VIEW_TITLES = {
    ALL_REPORTS: "Dashboard",
    ReportStatus.PENDING.value: "No Progress (Pending)",
    ReportStatus.IN_PROGRESS.value: "Active (In Progress)",
}

_STATUS_VALUES = {s.value for s in ReportStatus}


def filter_by_status(reports: Iterable[Report], status: ReportStatus) -> List[Report]:
    return [r for r in reports if r.status == status]


def filter_by_category(reports: Iterable[Report], category: str) -> List[Report]:
    return [r for r in reports if r.category == category]


def sort_newest_first(reports: Iterable[Report]) -> List[Report]:
    """Newest first; reports with equal timestamps keep their input order."""
    # sorted() is stable, including with reverse=True.
    return sorted(reports, key=lambda r: r.submitted_at, reverse=True)


def status_style_tag(status: Union[ReportStatus, str]) -> StyleToken:
    try:
        return _STYLE_TAGS[ReportStatus(status)]
    except ValueError:
        return StyleToken.ALERT


def count_by_status(reports: Iterable[Report]) -> ReportSummary:
    reports = list(reports)
    return ReportSummary(
        total_reports=len(reports),
        pending=len(filter_by_status(reports, ReportStatus.PENDING)),
        in_progress=len(filter_by_status(reports, ReportStatus.IN_PROGRESS)),
        resolved=len(filter_by_status(reports, ReportStatus.RESOLVED)),
    )


def apply_view_filter(reports: Iterable[Report], view_filter: str = ALL_REPORTS) -> List[Report]:
    """
    Authority dashboard list: everything, one status, or one category,
    always newest first.
    """
    if view_filter == ALL_REPORTS:
        selected = list(reports)
    elif view_filter in _STATUS_VALUES:
        selected = filter_by_status(reports, ReportStatus(view_filter))
    else:
        selected = filter_by_category(reports, view_filter)
    return sort_newest_first(selected)


def view_title(view_filter: str) -> str:
    return _VIEW_TITLES.get(view_filter, view_filter)


def list_categories(reports: Iterable[Report]) -> List[str]:
    """Distinct categories in the order they first appear."""
    return list(dict.fromkeys(r.category for r in reports))


def authority_actions(status: ReportStatus) -> List[ReportStatus]:
    return list(_AUTHORITY_ACTIONS.get(status, []))


def can_reopen(status: ReportStatus) -> bool:
    return status == ReportStatus.RESOLVED


def is_allowed_transition(current: ReportStatus, new: ReportStatus) -> bool:
    if current == new:
        return True
    if new in _AUTHORITY_ACTIONS.get(current, []):
        return True
    return can_reopen(current) and new == ReportStatus.PENDING


def to_card(report: Report) -> ReportCard:
    return ReportCard(
        **report.model_dump(),
        status_style=status_style_tag(report.status),
        actions=authority_actions(report.status),
        can_reopen=can_reopen(report.status),
    )
