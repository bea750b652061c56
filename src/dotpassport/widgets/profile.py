"""Profile widget: avatar, display name, bio, socials and identities."""

from ..core.base_widget import BaseWidget
from ..core.config import ProfileWidgetConfig
from ..core.http_client import CancellationSignal
from ..core.models import UserProfile
from ..core.utils import safe_url


class ProfileWidget(BaseWidget[ProfileWidgetConfig, UserProfile]):
    """Displays the profile card for an address."""

    config_class = ProfileWidgetConfig
    widget_type = "profile"

    async def fetch_data(self, signal: CancellationSignal, force_refresh: bool = False) -> UserProfile:
        return await self.client.get_widget_profile(
            self.config.address, signal=signal, force_refresh=force_refresh
        )

    def render(self) -> str:
        profile = self.state.data

        social_links = []
        if self.config.show_socials:
            # Links with a non-http(s) scheme are dropped entirely
            social_links = [
                (platform, safe_url(url))
                for platform, url in profile.social_links.items()
                if safe_url(url)
            ]

        return self.render_template(
            "widgets/profile.html",
            address=profile.address,
            display_name=profile.display_name or "Anonymous",
            avatar_url=safe_url(profile.avatar_url),
            bio=profile.bio if self.config.show_bio else None,
            social_links=social_links,
            identities=profile.polkadot_identities if self.config.show_identities else [],
        )
