"""
campaign-uplift -- per-activity campaign attribution.

Estimates the incremental signups and activations each marketing activity
caused, by comparing its post window against the channel's organic
baseline, grades every estimate HIGH/MEDIUM/LOW, and splits lift among
activities whose post windows overlap on the same channel.
"""

__version__ = "0.1.0"
