"""Bundled static content: udev rules, OpenOCD configs and the default theme."""
