"""Category widget: one category score with breakdown and advice."""

from ..core.base_widget import BaseWidget
from ..core.config import CategoryWidgetConfig
from ..core.http_client import CancellationSignal
from ..core.models import SpecificCategoryScore

MAX_REASONS = 3
MAX_ADVICES = 2


class CategoryWidget(BaseWidget[CategoryWidgetConfig, SpecificCategoryScore]):
    """Displays a single reputation category for an address.

    Required params:
        - category_key: Category to display (e.g., "longevity", "txCount")

    Optional params:
        - show_breakdown: List the top scoring reasons (default: True)
        - show_advice: List tips for improvement (default: True)
    """

    config_class = CategoryWidgetConfig
    widget_type = "category"
    fetch_fields = ("address", "category_key")

    async def fetch_data(self, signal: CancellationSignal, force_refresh: bool = False) -> SpecificCategoryScore:
        return await self.client.get_widget_category(
            self.config.address,
            self.config.category_key,
            signal=signal,
            force_refresh=force_refresh,
        )

    def render(self) -> str:
        data = self.state.data
        definition = data.definition

        reasons = []
        advices = []
        if definition is not None:
            if self.config.show_breakdown:
                reasons = definition.reasons[:MAX_REASONS]
            if self.config.show_advice:
                advices = [a for r in definition.reasons for a in r.advices][:MAX_ADVICES]

        return self.render_template(
            "widgets/category.html",
            display_name=definition.display_name if definition else data.category.key,
            description=definition.short_description if definition else "",
            score=data.category.score,
            reasons=reasons,
            advices=advices,
        )
