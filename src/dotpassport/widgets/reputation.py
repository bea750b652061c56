"""Reputation widget: total score plus category breakdown."""

from ..core.base_widget import BaseWidget
from ..core.config import ReputationWidgetConfig
from ..core.http_client import CancellationSignal
from ..core.models import UserScores


class ReputationWidget(BaseWidget[ReputationWidgetConfig, UserScores]):
    """Displays an address's total reputation score.

    Optional params:
        - show_categories: Show category breakdown (default: True)
        - max_categories: Number of categories to list (default: 6)
        - compact: Smaller layout (default: False)
    """

    config_class = ReputationWidgetConfig
    widget_type = "reputation"

    async def fetch_data(self, signal: CancellationSignal, force_refresh: bool = False) -> UserScores:
        return await self.client.get_widget_reputation(
            self.config.address, signal=signal, force_refresh=force_refresh
        )

    def render(self) -> str:
        scores = self.state.data
        categories = []
        if self.config.show_categories:
            categories = list(scores.categories.items())[:self.config.max_categories]

        return self.render_template(
            "widgets/reputation.html",
            total_score=scores.total_score,
            categories=categories,
            compact=self.config.compact,
        )
