"""
Dashboard summary: alert counts and headline KPIs.
"""

from .alerts import SummaryAlerts, attention_items, summary_alerts

__all__ = ["SummaryAlerts", "attention_items", "summary_alerts"]
