"""Comparison of a finished session against the previous one of its type."""

import logging
from dataclasses import dataclass, field

from ..models.session import WorkoutSession, format_weight

logger = logging.getLogger(__name__)

# Best-set volume below this fraction of the previous best is a regression
REGRESSION_THRESHOLD = 0.9

# Volume increase (percent) that earns the "strong progress" summary
VOLUME_PROGRESS_PERCENT = 5.0

FIRST_SESSION_SUMMARY = "First session of this type! Solid baseline established."


@dataclass
class SessionAnalysis:
    """Outcome of comparing two sessions."""

    improvements: list[str] = field(default_factory=list)
    regressions: list[str] = field(default_factory=list)
    prs: list[str] = field(default_factory=list)
    volume_change: float = 0.0
    volume_change_percent: float = 0.0
    summary: str = FIRST_SESSION_SUMMARY

    @property
    def has_prs(self) -> bool:
        return bool(self.prs)

    @property
    def is_positive(self) -> bool:
        return len(self.improvements) >= len(self.regressions)

    def to_dict(self) -> dict:
        return {
            "improvements": self.improvements,
            "regressions": self.regressions,
            "prs": self.prs,
            "volume_change": self.volume_change,
            "volume_change_percent": self.volume_change_percent,
            "summary": self.summary,
        }


class SessionAnalysisEngine:
    """Finds PRs, improvements and regressions between two sessions."""

    def analyze(
        self, current: WorkoutSession, previous: WorkoutSession | None
    ) -> SessionAnalysis:
        """Compare ``current`` with the previous session of the same type.

        Each completed exercise is matched to the first completed exercise
        of ``previous`` sharing its catalog exercise, and their best sets
        are compared.
        """
        if previous is None:
            return SessionAnalysis()

        volume_change = current.total_volume - previous.total_volume
        volume_change_percent = 0.0
        if previous.total_volume > 0:
            volume_change_percent = volume_change / previous.total_volume * 100

        # (volume delta, text) pairs; sorted stably so ties keep session order
        improvements: list[tuple[float, str]] = []
        regressions: list[str] = []
        prs: list[str] = []

        for current_ex in current.completed_exercises:
            if current_ex.exercise_id is None:
                continue

            previous_ex = previous.exercise_for_catalog(
                current_ex.exercise_id, completed_only=True
            )
            if previous_ex is None:
                continue

            current_best = current_ex.best_set
            previous_best = previous_ex.best_set
            if current_best is None or previous_best is None:
                continue

            name = current_ex.name
            delta = current_best.volume - previous_best.volume

            if current_best.weight > previous_best.weight:
                gain = current_best.weight - previous_best.weight
                prs.append(
                    f"{name}: {format_weight(current_best.weight)}kg "
                    f"(+{format_weight(gain)}kg)"
                )
                improvements.append((delta, f"{name}: weight PR!"))
            elif (
                current_best.weight == previous_best.weight
                and current_best.reps > previous_best.reps
            ):
                extra = current_best.reps - previous_best.reps
                improvements.append(
                    (delta, f"{name}: +{extra} reps at {format_weight(current_best.weight)}kg")
                )
            elif current_best.volume > previous_best.volume:
                improvements.append((delta, f"{name}: better volume"))
            elif current_best.volume < previous_best.volume * REGRESSION_THRESHOLD:
                regressions.append(f"{name}: volume down")

        improvements.sort(key=lambda item: item[0], reverse=True)
        improvement_texts = [text for _, text in improvements]

        summary = self._generate_summary(
            improvements=len(improvement_texts),
            regressions=len(regressions),
            prs=len(prs),
            volume_change_percent=volume_change_percent,
        )
        logger.debug(
            "Analyzed session %s: %d PRs, %d improvements, %d regressions",
            current.id,
            len(prs),
            len(improvement_texts),
            len(regressions),
        )

        return SessionAnalysis(
            improvements=improvement_texts,
            regressions=regressions,
            prs=prs,
            volume_change=volume_change,
            volume_change_percent=volume_change_percent,
            summary=summary,
        )

    def _generate_summary(
        self,
        improvements: int,
        regressions: int,
        prs: int,
        volume_change_percent: float,
    ) -> str:
        if prs > 0:
            plural = "s" if prs > 1 else ""
            return f"Great session! {prs} new personal record{plural}!"

        if volume_change_percent > VOLUME_PROGRESS_PERCENT:
            return f"Strong progress! Volume up {volume_change_percent:.1f}%"

        if improvements > regressions:
            plural = "s" if improvements > 1 else ""
            return f"Good session with {improvements} improvement{plural}."

        if regressions > improvements:
            return "Tough session. Recover well."

        return "Stable session, performance maintained."
