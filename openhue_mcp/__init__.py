"""OpenHue MCP server - Philips Hue control through the OpenHue CLI."""

__version__ = "1.0.0"
