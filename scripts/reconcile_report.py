"""Print the completion overview and alerts without going through Flask.

Usage: python scripts/reconcile_report.py [YYYY-MM-DD]
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.catechism_tracker.catechism_tracker.common.datetime_utils import parse_iso_date
from src.catechism_tracker.catechism_tracker.container import build_container


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    today = parse_iso_date(sys.argv[1]) if len(sys.argv) > 1 else None
    report = container.reconciliation_service.build_report(today)

    if report.window:
        print(f"Window: {report.window.start_date} .. {report.window.end_date}")
    print(f"Chapters: {', '.join(str(c) for c in report.chapters)}")
    print(
        f"Teachers: {report.stats.total_teachers} | "
        f"attendance {report.stats.attendance_rate}% | "
        f"evaluation {report.stats.evaluation_rate}% | "
        f"overall {report.stats.overall_rate}%"
    )
    for c in report.completion.values():
        print(
            f"  {c.teacher.full_name:<30} {c.teacher.class_name or '-':<12} "
            f"att {c.attendance.completion_rate:>3}%  eval {c.evaluation.completion_rate:>3}%"
        )
    for alert in report.alerts:
        print(f"[{alert.severity.value}] {alert.teacher.full_name}: {alert.message}")


if __name__ == "__main__":
    main()
