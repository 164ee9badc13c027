"""
Persistence collaborator for campaign-uplift.

Stores activities and daily metrics, and replaces the activity uplift
table wholesale after each successful recompute.
"""

from campaign_uplift.persistence.store import UpliftStore, to_uplift_rows

__all__ = ["UpliftStore", "to_uplift_rows"]
