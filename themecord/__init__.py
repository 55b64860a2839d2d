"""Themecord: a web view host that layers user CSS themes over the page."""

__version__ = "0.3.0"
