"""picoprep - Raspberry Pi Pico 2 (RP2350) workstation provisioning."""

__version__ = "0.1.0"
