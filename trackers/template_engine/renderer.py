"""
Card Renderer for tracker views.
Handles Jinja2 template loading and rendering of view models to HTML.
"""

from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..movies.views import DetailView, MovieCardView, WatchlistView
from ..shipping.views import ShippingDashboard
from ..shopping.views import ShoppingSummary


class CardRenderer:
    """
    Renders tracker view models as HTML cards using Jinja2 templates.

    Usage:
        renderer = CardRenderer()
        html = renderer.render_shipping(tracker.dashboard())
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        """
        Initialize the card renderer.

        Args:
            templates_dir: Path to templates directory.
                          Defaults to ./templates relative to this file.
        """
        if templates_dir is None:
            templates_dir = Path(__file__).parent / "templates"

        self.templates_dir = templates_dir
        self.env = Environment(
            loader=FileSystemLoader(str(templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_template(self, name: str, context: dict[str, Any]) -> str:
        """
        Render a single template.

        Args:
            name: Template file name (e.g., "shipping.html")
            context: Template variables

        Returns:
            Rendered HTML string
        """
        template = self.env.get_template(name)
        return template.render(**context)

    def render_shipping(self, dashboard: ShippingDashboard) -> str:
        return self.render_template("shipping.html", {"dashboard": dashboard})

    def render_shopping(self, summary: ShoppingSummary) -> str:
        return self.render_template("shopping.html", {"summary": summary})

    def render_movie_grid(self, cards: list[MovieCardView]) -> str:
        return self.render_template("movie_grid.html", {"cards": cards})

    def render_watchlist(self, watchlist: WatchlistView) -> str:
        return self.render_template("watchlist.html", {"watchlist": watchlist})

    def render_movie_detail(self, view: DetailView) -> str:
        return self.render_template("movie_detail.html", {"view": view})
