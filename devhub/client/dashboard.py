from pathlib import Path
from typing import Optional

from devhub.client.api import DevHubClient
from devhub.client.auth import AuthGate, SessionStore
from devhub.client.cache import LocalCache
from devhub.client.chart import ChartRenderer
from devhub.client.config import ClientSettings, client_settings
from devhub.client.export import export_csv
from devhub.client.view_model import Alert, CompoundListViewModel, default_alert


class Dashboard:
    """Wires the client, view-model, chart and auth gate together."""

    def __init__(
        self,
        settings: ClientSettings = client_settings,
        client: Optional[DevHubClient] = None,
        alert: Alert = default_alert,
    ):
        self.settings = settings
        self.client = client or DevHubClient(settings.api_url, settings.request_timeout)
        self.view_model = CompoundListViewModel(
            self.client,
            cache=LocalCache(settings.cache_path),
            alert=alert,
            debounce_seconds=settings.debounce_seconds,
        )
        self.chart = ChartRenderer(settings.chart_path)
        self._unsubscribe_chart = self.view_model.subscribe(self.chart)
        self.gate = AuthGate(SessionStore(self.client), self.view_model, alert=alert)

    async def open(self) -> None:
        # Draw whatever the cache held before the first fetch returns
        self.chart.render(self.view_model.state.compounds)
        await self.gate.start()

    def export_csv(self) -> Path:
        return export_csv(self.view_model.state.compounds, self.settings.download_dir)

    def close(self) -> None:
        self._unsubscribe_chart()
        self.gate.close()
        self.chart.dispose()
