"""pybusfleet - Async Python client and reporting core for a bus-fleet admin console."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pybusfleet")
except PackageNotFoundError:
    __version__ = "0+local"
from pybusfleet.aggregation import (
    ReportDateRange,
    compute_dashboard_stats,
    compute_report_stats,
    export_report_csv,
    report_filename,
)
from pybusfleet.client import FleetClient
from pybusfleet.config import DemoAccount, FleetConfig
from pybusfleet.console import FleetConsole, LoadResult, LoadStatus, ViewState
from pybusfleet.exceptions import (
    FleetAccountExistsError,
    FleetApiError,
    FleetAuthenticationError,
    FleetConfigError,
    FleetDocumentNotFoundError,
    FleetError,
    FleetRateLimitError,
    FleetSessionExpiredError,
    FleetStoreUnavailableError,
    FleetTransportError,
    FleetValidationError,
    FleetWeakPasswordError,
)
from pybusfleet.metrics import utilization
from pybusfleet.models import (
    Bus,
    BusForm,
    BusView,
    DashboardStats,
    Driver,
    DriverUpdateForm,
    DriverView,
    Location,
    NewDriverForm,
    ReportStats,
    Route,
    RouteForm,
)
from pybusfleet.notifications import (
    CallbackNotifier,
    LoggingNotifier,
    MemoryNotifier,
    Notification,
    NotificationCategory,
    Notifier,
    PermissionGatedNotifier,
    PermissionState,
)
from pybusfleet.resolver import UNASSIGNED, resolve_bus_view, resolve_driver_view
from pybusfleet.session import Session

__all__ = [
    "__version__",
    "Bus",
    "BusForm",
    "BusView",
    "CallbackNotifier",
    "DashboardStats",
    "DemoAccount",
    "Driver",
    "DriverUpdateForm",
    "DriverView",
    "FleetAccountExistsError",
    "FleetApiError",
    "FleetAuthenticationError",
    "FleetClient",
    "FleetConfig",
    "FleetConfigError",
    "FleetConsole",
    "FleetDocumentNotFoundError",
    "FleetError",
    "FleetRateLimitError",
    "FleetSessionExpiredError",
    "FleetStoreUnavailableError",
    "FleetTransportError",
    "FleetValidationError",
    "FleetWeakPasswordError",
    "LoadResult",
    "LoadStatus",
    "Location",
    "LoggingNotifier",
    "MemoryNotifier",
    "NewDriverForm",
    "Notification",
    "NotificationCategory",
    "Notifier",
    "PermissionGatedNotifier",
    "PermissionState",
    "ReportDateRange",
    "ReportStats",
    "Route",
    "RouteForm",
    "Session",
    "UNASSIGNED",
    "ViewState",
    "compute_dashboard_stats",
    "compute_report_stats",
    "export_report_csv",
    "report_filename",
    "resolve_bus_view",
    "resolve_driver_view",
    "utilization",
]
