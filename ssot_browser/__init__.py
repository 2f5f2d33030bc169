"""
Top-level package for the SSOT browser.

This package exposes the core architecture (domain, services, UI adapters).
Most code should import from submodules such as:
    ssot_browser.core
    ssot_browser.services
    ssot_browser.ui
"""

__all__: list[str] = []
