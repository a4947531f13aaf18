"""SmartPass Bus Tracker: seat QR scanning and trip logging."""

__version__ = "1.0.0"
