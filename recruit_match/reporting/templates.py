"""Plain-text reports for the CLI, rendered with Jinja2.

Templates live in the recruit_match.reporting.report_templates package
directory. StrictUndefined makes a template that references a missing value
fail loudly instead of printing an empty string.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from recruit_match.domain.models import Candidate, HydratedMatch, MatchFilter, Opportunity
from recruit_match.matching.models import ScoredCandidate, ScoredOpportunity
from recruit_match.reconciliation.models import ReconciliationSummary
from recruit_match.utils.timestamps import format_timestamp_for_log

logger = logging.getLogger(__name__)


class ReportRenderingError(Exception):
    """Raised when a report template fails to render."""

    pass


class ReportRenderer:
    """Renders reconciliation summaries, match listings and on-demand results."""

    def __init__(self, template_dir: str = "report_templates"):
        self.env = Environment(
            loader=PackageLoader("recruit_match.reporting", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

    def render_summary(self, summary: ReconciliationSummary) -> str:
        return self._render("summary.txt.j2", {"summary": summary.as_dict()})

    def render_matches(
        self, matches: Sequence[HydratedMatch], match_filter: Optional[MatchFilter] = None
    ) -> str:
        """Render a persisted-match listing, one block per match."""
        rows = [
            {
                "id": h.match.id,
                "score": h.match.score,
                "status": h.match.status.value,
                "updated_at": format_timestamp_for_log(h.match.updated_at),
                "candidate": _candidate_label(h.candidate, h.match.candidate_id),
                "opportunity": _opportunity_label(h.opportunity, h.match.opportunity_id),
                "reasons": h.match.reasons,
                "notes": h.match.notes,
            }
            for h in matches
        ]
        return self._render(
            "matches.txt.j2", {"rows": rows, "filter_label": _filter_label(match_filter)}
        )

    def render_candidate_results(
        self, candidate: Candidate, results: Sequence[ScoredOpportunity]
    ) -> str:
        rows = [
            {
                "score": r.score,
                "name": _opportunity_label(r.opportunity, r.opportunity.id),
                "reasons": r.reasons,
            }
            for r in results
        ]
        heading = f"Opportunities for {_candidate_label(candidate, candidate.id)}"
        return self._render(
            "find_results.txt.j2", {"heading": heading, "rows": rows, "noun": "opportunities"}
        )

    def render_opportunity_results(
        self, opportunity: Opportunity, results: Sequence[ScoredCandidate]
    ) -> str:
        rows = [
            {
                "score": r.score,
                "name": _candidate_label(r.candidate, r.candidate.id),
                "reasons": r.reasons,
            }
            for r in results
        ]
        heading = f"Candidates for {_opportunity_label(opportunity, opportunity.id)}"
        return self._render(
            "find_results.txt.j2", {"heading": heading, "rows": rows, "noun": "candidates"}
        )

    def _render(self, template_name: str, context: Dict[str, Any]) -> str:
        try:
            return self.env.get_template(template_name).render(context).rstrip() + "\n"
        except TemplateError as e:
            error_msg = f"Report rendering failed ({template_name}): {e}"
            logger.error(error_msg, exc_info=True)
            raise ReportRenderingError(error_msg) from e


def _candidate_label(candidate: Optional[Candidate], candidate_id: Optional[int]) -> str:
    if candidate is None:
        return f"candidate {candidate_id} (missing)"
    label = f"{candidate.display_name} (#{candidate.id})"
    if candidate.email:
        label += f" <{candidate.email}>"
    return label


def _opportunity_label(opportunity: Optional[Opportunity], opportunity_id: Optional[int]) -> str:
    if opportunity is None:
        return f"opportunity {opportunity_id} (missing)"
    where = ", ".join(p for p in (opportunity.city, opportunity.location) if p)
    label = f"{opportunity.display_name} (#{opportunity.id}, {opportunity.kind.value})"
    if where:
        label += f" - {where}"
    if not opportunity.is_active:
        label += " [inactive]"
    return label


def _filter_label(match_filter: Optional[MatchFilter]) -> str:
    if match_filter is None:
        return ""
    parts: List[str] = []
    if match_filter.candidate_id is not None:
        parts.append(f"candidate={match_filter.candidate_id}")
    if match_filter.opportunity_id is not None:
        parts.append(f"opportunity={match_filter.opportunity_id}")
    if match_filter.status is not None:
        parts.append(f"status={match_filter.status.value}")
    return ", ".join(parts)
