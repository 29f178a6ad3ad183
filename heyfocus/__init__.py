"""HeyFocus - task and focus state core."""

__version__ = "1.0.0"
