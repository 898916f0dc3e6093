"""Documents Module -- employee compliance documents and dashboard alerts."""

from workforce_modules.documents.service import DashboardAlerts, DocumentService

__all__ = ["DashboardAlerts", "DocumentService"]
