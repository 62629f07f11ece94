from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from surveyflow.models.analysis import QuestionStatistics, SurveyReport
from surveyflow.models.survey import QuestionType

RANKED_RESPONSES_LABEL = "Responses ranked"
RANKED_SELECTIONS_LABEL = "Ranked selections"

_PIE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.DROPDOWN_CHOICE)


class ChartType(str, Enum):
    """Supported chart shapes for survey visualisations."""

    BAR = "bar"
    PIE = "pie"


@dataclass(frozen=True)
class ChartData:
    """Structured payload describing a chart for the UI layer."""

    chart_type: ChartType
    labels: Tuple[str, ...]
    values: Tuple[float, ...]
    title: str
    question_id: str | None = None
    question_text: str | None = None
    description: str | None = None
    metadata: dict[str, int | float | str] = field(default_factory=dict)

    def to_series(self) -> List[Tuple[str, float]]:
        """Return data as a list of (label, value) tuples."""

        return list(zip(self.labels, self.values))

    def as_dict(self) -> dict[str, float]:
        """Return data as a simple label -> value mapping."""

        return {label: value for label, value in zip(self.labels, self.values)}


class SurveyChartBuilder:
    """Prepare chart-ready data from an aggregated survey report."""

    def __init__(self, report: SurveyReport) -> None:
        if report is None:
            raise ValueError("report must be provided")
        self._report = report

    def respondent_summary(self) -> ChartData:
        """Return a chart of how many responses each respondent submitted."""

        counts = self._report.per_respondent_counts
        labels = tuple(counts)
        values = tuple(float(count) for count in counts.values())
        if not labels:
            labels, values = ("No responses recorded",), (0.0,)

        return ChartData(
            chart_type=ChartType.BAR,
            labels=labels,
            values=values,
            title="Responses per respondent",
            description="Number of submitted responses for each respondent.",
            metadata={
                "respondents": self._report.respondent_count,
                "responses": self._report.response_count,
            },
        )

    def question_chart(self, question_id: str, *, chart_type: ChartType | str | None = None) -> ChartData:
        """Return chart data for a single choice question."""

        statistics = self._report.per_question_tallies.get(question_id)
        if statistics is None:
            raise KeyError(f"No tallies for question id: {question_id}")

        resolved_type = self._resolve_chart_type(chart_type, statistics)
        labels, values = self._distribution(statistics)
        return ChartData(
            chart_type=resolved_type,
            labels=labels,
            values=values,
            title=statistics.prompt,
            question_id=statistics.question_id,
            question_text=statistics.prompt,
            description=self._describe(statistics),
            metadata={
                "question_type": statistics.question_type.value,
                "responses": self._report.response_count,
            },
        )

    def all_question_charts(self, *, chart_type: ChartType | str | None = None) -> List[ChartData]:
        """Return chart data for every tallied question in survey order."""

        return [
            self.question_chart(question_id, chart_type=chart_type)
            for question_id in self._report.per_question_tallies
        ]

    def _resolve_chart_type(
        self,
        chart_type: ChartType | str | None,
        statistics: QuestionStatistics,
    ) -> ChartType:
        if chart_type is None:
            return ChartType.BAR

        if isinstance(chart_type, str):
            try:
                resolved = ChartType(chart_type)
            except ValueError as exc:
                raise ValueError(f"Unknown chart type: {chart_type}") from exc
        else:
            resolved = chart_type

        if resolved == ChartType.PIE and statistics.question_type not in _PIE_TYPES:
            raise ValueError("Pie charts are only supported for single-selection questions.")

        return resolved

    @staticmethod
    def _distribution(statistics: QuestionStatistics) -> Tuple[Tuple[str, ...], Tuple[float, ...]]:
        if statistics.ranked is not None:
            return (
                (RANKED_RESPONSES_LABEL, RANKED_SELECTIONS_LABEL),
                (
                    float(statistics.ranked.responses_ranked),
                    float(statistics.ranked.total_ranked_selections),
                ),
            )

        if not statistics.option_counts:
            return ("No choices configured",), (0.0,)

        labels = tuple(statistics.option_counts)
        values = tuple(float(count) for count in statistics.option_counts.values())
        return labels, values

    @staticmethod
    def _describe(statistics: QuestionStatistics) -> str:
        if statistics.question_type == QuestionType.RANKED_CHOICE:
            return "Ranked answers store rank positions only; per-option counts are unavailable."
        if statistics.question_type == QuestionType.MULTI_CHOICE:
            return "Each response may count towards several options."
        return "Choice distribution across recorded responses."


__all__ = [
    "ChartData",
    "ChartType",
    "SurveyChartBuilder",
]
