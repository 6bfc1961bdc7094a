# blueprints/reports/services.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Dict, List

from blueprints.relief.services import CoveredSlot, Dashboard


@dataclass
class _Line:
    start: str
    end: str
    class_name: str
    subject: str
    absent_teacher: str

    @property
    def time(self) -> str:
        return f"{self.start}–{self.end}"


def format_day(d: date) -> str:
    return f"{d:%A}, {d.day} {d:%B %Y}"


def relief_summary(dashboard: Dashboard, formatted_date: str | None = None) -> str:
    """Текстовая сводка для рассылки: кто отсутствует, кто кого заменяет, что не закрыто.

    Пустая строка, если в этот день замен не требуется.
    """
    if not dashboard.cards:
        return ""
    formatted_date = formatted_date or format_day(dashboard.date)

    lines: List[str] = [f"RELIEF SUMMARY — {formatted_date}", "", "ABSENT:"]
    for card in dashboard.cards:
        lines.append(f"• {card.teacher_name}")
    lines.append("")

    by_relief: Dict[str, List[_Line]] = {}
    uncovered: List[_Line] = []
    for card in dashboard.cards:
        for p in card.periods:
            s = p.slot
            item = _Line(f"{s.start_time:%H:%M}", f"{s.end_time:%H:%M}", s.class_name, s.subject, card.teacher_name)
            if isinstance(p, CoveredSlot):
                by_relief.setdefault(p.covering_teacher_name, []).append(item)
            else:
                uncovered.append(item)

    if by_relief:
        lines += ["RELIEF ASSIGNMENTS:", ""]
        for name in sorted(by_relief, key=lambda n: (n.casefold(), n)):
            lines.append(name.upper())
            for it in sorted(by_relief[name], key=lambda x: x.start):
                lines.append(f"• {it.time} → {it.class_name} {it.subject} (replacing {it.absent_teacher})")
            lines.append("")

    if uncovered:
        lines.append("UNCOVERED:")
        for it in sorted(uncovered, key=lambda x: x.start):
            lines.append(f"• {it.time} → {it.class_name} {it.subject} ({it.absent_teacher}) — no relief assigned")
        lines.append("")

    return "\n".join(lines).rstrip()
