"""
Mileage Kernel

Trip logging and monthly mileage settlement for a small fleet of drivers:
- Per-month fuel and depreciation rate table
- Driver profiles with vehicle type and fuel efficiency
- Trip records locked by the monthly submission lifecycle
- Deterministic settlement calculation with explicit rounding
"""

__version__ = "0.1.0"
