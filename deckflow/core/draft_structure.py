"""
Draft Structure for Deckflow
============================

Stage 2 handler. Builds the presentation skeleton from the draft document:
title, table of contents, discussion scope (what is and is not covered),
summary, relationships between consecutive sections, one overview
statement per section and the time plan.

`validate()` scores the skeleton:

    title 10 + TOC 10 + scope 10 + summary 10        (essential elements)
  + 30 * overview statements / sections               (overview coverage)
  + 10 sections present + 10 relationships present    (hierarchy)
  + 5 total time <= 80 min + 5 at least three phases  (time plan)
"""

import re
from typing import List, Optional, Sequence

from deckflow.models.content import DocumentRecord, Section, TOCItem
from deckflow.models.processing import (
    DiscussionScope,
    DraftStructure,
    DraftValidation,
    OverviewStatement,
    SectionRelationship,
    TimePhase,
)
from deckflow.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_TOTAL_MINUTES = 80
MAX_SECTIONS = 8
MIN_SUMMARY_LENGTH = 20
MIN_STATEMENT_LENGTH = 10

TOC_TITLE = re.compile(r'目次|table of contents|\btoc\b', re.IGNORECASE)
SUMMARY_TITLE = re.compile(r'まとめ|総括|summary|conclusion', re.IGNORECASE)
TIME_TITLE = re.compile(r'時間|配分|\btime\b|schedule', re.IGNORECASE)
NUMBERED_ITEM = re.compile(r'^\s*(\d+)\.\s+(.+)$')
BULLET_ITEM = re.compile(r'^\s*[-*]\s+(.+)$')
BOLD_PHRASE = re.compile(r'\*\*([^*]+)\*\*')
CORE_MESSAGE_BREAK = re.compile(r'[、。，,.]')

INCLUDED_MARKERS = ("話すこと", "in scope", "covered")
EXCLUDED_MARKERS = ("話さないこと", "out of scope", "not covered")
DESCRIBING_MARKERS = ("説明します", "示します", "解説します", "this section", "we explain", "we show")

PREREQUISITE_MARKERS = ("基本", "前提", "basics", "prerequisite")
CONTRAST_MARKERS = ("一方", "対して", "反対", "異なる", "しかし", " vs ", "比較", "however", "on the other hand", "in contrast")
SUPPORT_MARKERS = ("例えば", "具体的", "実際", "事例", "ケース", "詳細", "for example", "in practice", "case study")

TOTAL_MINUTES = re.compile(r'(\d+)\s*(?:分|min)')
PHASE_LINE = re.compile(r'Phase\s*\d+\s*[:：]\s*([^（(】\n]+?)\s*[（(](\d+)\s*(?:分|min)[^）)]*[）)]', re.IGNORECASE)
ACTIVITY_LINE = re.compile(r'^\s*\d+\s*-\s*\d+\s*(?:分|min)\s*[:：]\s*(.+)$')

DEFAULT_PHASES = [
    TimePhase(name="Research", minutes=30, activities=[
        "Identify the key sources",
        "Collect core data and cases",
        "Reach working confidence in the material",
    ]),
    TimePhase(name="Structure and writing", minutes=40, activities=[
        "Draft the essential elements",
        "Write overview statements",
        "Write the free-form sections",
        "Check overall flow and logic",
    ]),
    TimePhase(name="Polish", minutes=10, activities=[
        "Final pass on overview statements",
        "Final check of essential elements",
    ]),
]

GENERATED_STATEMENTS = [
    "This section explains {title} in detail and builds practical understanding.",
    "The key points of {title} and how to put them to use.",
    "{title}, from basic concepts to applications.",
    "How to implement {title}, with practices that lead to success.",
]


def _contains_any(text: str, markers: Sequence[str]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


class DraftStructureBuilder:
    """Builds and validates the stage 2 draft structure."""

    def build(self, document: DocumentRecord) -> DraftStructure:
        sections = document.sections
        total_minutes, phases = self.extract_time_plan(sections)

        structure = DraftStructure(
            title=document.title or "Untitled Presentation",
            table_of_contents=self.extract_table_of_contents(sections),
            discussion_scope=self.extract_scope(sections),
            summary=self.extract_summary(sections),
            section_ids=[s.id for s in sections],
            relationships=self.identify_relationships(sections),
            overview_statements=[self.overview_statement(s) for s in sections],
            total_minutes=total_minutes,
            phases=phases
        )
        logger.info(
            f"Draft structure: {len(sections)} sections, {len(structure.table_of_contents)} TOC entries, "
            f"{structure.total_minutes} min"
        )
        return structure

    # ===== Essential elements =====

    def extract_table_of_contents(self, sections: Sequence[Section]) -> List[TOCItem]:
        toc_section = next((s for s in sections if TOC_TITLE.search(s.title)), None)

        if toc_section is None:
            return [
                TOCItem(title=s.title, level=s.level, page=index + 1)
                for index, s in enumerate(sections)
                if s.level <= 2
            ]

        items = []
        for index, line in enumerate(toc_section.content.split("\n")):
            numbered = NUMBERED_ITEM.match(line)
            bullet = BULLET_ITEM.match(line)
            if numbered:
                items.append(TOCItem(title=numbered.group(2).strip(), level=1, page=int(numbered.group(1))))
            elif bullet:
                items.append(TOCItem(title=bullet.group(1).strip(), level=1, page=index + 1))
        return items

    @staticmethod
    def _scope_mode(text: str) -> Optional[str]:
        if _contains_any(text, EXCLUDED_MARKERS):
            return "excluded"
        if _contains_any(text, INCLUDED_MARKERS):
            return "included"
        return None

    def extract_scope(self, sections: Sequence[Section]) -> DiscussionScope:
        """Bullets under 'covered' / 'not covered' headings or lines; level <= 2 titles otherwise."""
        scope = {"included": [], "excluded": []}

        for section in sections:
            mode = self._scope_mode(section.title)
            if mode is None and self._scope_mode(section.content) is None:
                continue

            for line in section.content.split("\n"):
                bullet = BULLET_ITEM.match(line)
                if bullet is None:
                    mode = self._scope_mode(line) or mode
                elif mode is not None:
                    scope[mode].append(bullet.group(1).strip())

        if not scope["included"] and not scope["excluded"]:
            scope["included"] = [s.title for s in sections if s.level <= 2]

        return DiscussionScope(**scope)

    def extract_summary(self, sections: Sequence[Section]) -> str:
        summary = next((s for s in sections if SUMMARY_TITLE.search(s.title)), None)
        if summary is not None and summary.content.strip():
            return summary.content.strip()

        main_points = [s.title for s in sections if s.level <= 2][:3]
        if not main_points:
            return ""
        return f"This presentation covers {', '.join(main_points)}."

    # ===== Hierarchy =====

    def identify_relationships(self, sections: Sequence[Section]) -> List[SectionRelationship]:
        relationships = []
        for current, following in zip(sections, sections[1:]):
            if _contains_any(current.title, PREREQUISITE_MARKERS):
                kind = "prerequisite"
            elif _contains_any(current.content, CONTRAST_MARKERS) or _contains_any(following.content, CONTRAST_MARKERS):
                kind = "contrasts-with"
            elif _contains_any(following.content, SUPPORT_MARKERS):
                kind = "supports"
            else:
                kind = "builds-on"
            relationships.append(SectionRelationship(
                from_section=current.id,
                to_section=following.id,
                relationship=kind
            ))
        return relationships

    def overview_statement(self, section: Section) -> OverviewStatement:
        """Longest bold phrase over 20 chars, else a describing line, else generated."""
        statement = self._find_statement(section.content)
        if statement is not None:
            core = CORE_MESSAGE_BREAK.split(statement)[0].strip() or statement
            return OverviewStatement(section_id=section.id, statement=statement, core_message=core)

        return OverviewStatement(
            section_id=section.id,
            statement=self._generate_statement(section),
            core_message=section.title,
            generated=True
        )

    @staticmethod
    def _find_statement(content: str) -> Optional[str]:
        bold = [phrase.strip() for phrase in BOLD_PHRASE.findall(content) if len(phrase.strip()) > 20]
        if bold:
            return max(bold, key=len)

        for line in content.split("\n"):
            if _contains_any(line, DESCRIBING_MARKERS):
                return line.strip()
        return None

    @staticmethod
    def _generate_statement(section: Section) -> str:
        index = 0
        if _contains_any(section.content, ("方法", "手順", "how to", "method")):
            index = 1
        if _contains_any(section.content, ("基本", "概念", "concept", "basics")):
            index = 2
        if _contains_any(section.content, ("実装", "実際", "implement")):
            index = 3
        return GENERATED_STATEMENTS[index].format(title=section.title)

    # ===== Time plan =====

    def extract_time_plan(self, sections: Sequence[Section]):
        """(total minutes, phases); the default 80 minute plan when nothing parses."""
        time_section = next(
            (
                s for s in sections
                if TIME_TITLE.search(s.title) or "80分" in s.content or "Phase" in s.content
            ),
            None
        )
        if time_section is None:
            return DEFAULT_TOTAL_MINUTES, [p.model_copy(deep=True) for p in DEFAULT_PHASES]

        phases = self._parse_phases(time_section.content)
        if not phases:
            return DEFAULT_TOTAL_MINUTES, [p.model_copy(deep=True) for p in DEFAULT_PHASES]

        total = TOTAL_MINUTES.search(time_section.content)
        total_minutes = int(total.group(1)) if total else sum(p.minutes for p in phases)
        return total_minutes, phases

    @staticmethod
    def _parse_phases(content: str) -> List[TimePhase]:
        phases: List[TimePhase] = []
        for line in content.split("\n"):
            phase = PHASE_LINE.search(line)
            if phase:
                phases.append(TimePhase(name=phase.group(1).strip(), minutes=int(phase.group(2))))
                continue
            activity = ACTIVITY_LINE.match(line)
            if activity and phases:
                phases[-1].activities.append(activity.group(1).strip())
        return phases

    # ===== Validation =====

    def validate(self, structure: DraftStructure) -> DraftValidation:
        issues = []
        recommendations = []
        section_count = len(structure.section_ids)

        if not structure.title.strip():
            issues.append("The draft has no title")
        if not structure.table_of_contents:
            issues.append("The draft has no table of contents")
        if not structure.discussion_scope.included:
            issues.append("The draft does not say what it covers")
        if len(structure.summary.strip()) < MIN_SUMMARY_LENGTH:
            issues.append("The summary is too short")

        weak = [o for o in structure.overview_statements if len(o.statement.strip()) < MIN_STATEMENT_LENGTH]
        if weak:
            issues.append(f"{len(weak)} sections are missing an overview statement")

        if structure.total_minutes > DEFAULT_TOTAL_MINUTES:
            recommendations.append(
                f"The plan runs {structure.total_minutes} minutes, over the {DEFAULT_TOTAL_MINUTES} minute limit; trim content"
            )
        if section_count > MAX_SECTIONS:
            recommendations.append(f"{section_count} sections is a lot; consider merging some")
        if len(structure.overview_statements) < section_count:
            recommendations.append("Add an overview statement to every section")

        return DraftValidation(
            issues=issues,
            recommendations=recommendations,
            completeness=self.completeness(structure)
        )

    @staticmethod
    def completeness(structure: DraftStructure) -> int:
        score = 0.0
        section_count = len(structure.section_ids)

        if structure.title:
            score += 10
        if structure.table_of_contents:
            score += 10
        if structure.discussion_scope.included:
            score += 10
        if len(structure.summary) > MIN_SUMMARY_LENGTH:
            score += 10

        score += min(30.0, len(structure.overview_statements) / max(section_count, 1) * 30)

        if section_count > 0:
            score += 10
        if structure.relationships:
            score += 10

        if structure.total_minutes <= DEFAULT_TOTAL_MINUTES:
            score += 5
        if len(structure.phases) >= 3:
            score += 5

        return round(score)
