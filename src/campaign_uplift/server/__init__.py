"""HTTP trigger surface for campaign-uplift."""

from campaign_uplift.server.app import create_app, run_server

__all__ = ["create_app", "run_server"]
