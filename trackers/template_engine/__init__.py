# Template Engine Module
# Jinja2 HTML card templates for the tracker views

from .renderer import CardRenderer

__all__ = [
    "CardRenderer",
]
