"""Badge widget: earned badges, or one badge by key."""

import logging

from ..core.base_widget import BaseWidget
from ..core.config import BadgeWidgetConfig
from ..core.http_client import CancellationSignal
from ..core.models import BadgeData

logger = logging.getLogger(__name__)


class BadgeWidget(BaseWidget[BadgeWidgetConfig, BadgeData]):
    """Displays badges earned by an address.

    With ``badge_key`` set the widget shows that single badge, or a locked
    placeholder built from the badge definition when it is not earned yet.

    Optional params:
        - badge_key: Show one badge instead of the grid
        - max_badges: Grid size limit (default: 6)
        - show_progress: Show the date each badge was earned (default: False)
    """

    config_class = BadgeWidgetConfig
    widget_type = "badge"
    fetch_fields = ("address", "badge_key")

    async def fetch_data(self, signal: CancellationSignal, force_refresh: bool = False) -> BadgeData:
        return await self.client.get_widget_badges(
            self.config.address,
            self.config.badge_key,
            signal=signal,
            force_refresh=force_refresh,
        )

    def render(self) -> str:
        data = self.state.data
        context = {"show_progress": self.config.show_progress, "not_earned": False, "definition": None}

        if data.kind == "single":
            if not data.is_earned:
                if data.definition is None:
                    logger.warning("[BadgeWidget] Badge not earned and no definition for %s", data.address)
                context.update(not_earned=data.definition is not None, definition=data.definition)
                badges = []
            else:
                badges = [data.badge]
        else:
            badges = data.badges[:self.config.max_badges]

        return self.render_template("widgets/badge.html", badges=badges, **context)
