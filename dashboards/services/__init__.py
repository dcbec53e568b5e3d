from .marketplace_reports import MarketplaceReportService

__all__ = ['MarketplaceReportService']
