"""drivepay SDK - Core functionality for fiscal-month driver payroll."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_show_tips,
    get_profile_path,
    load_profile,
    save_profile,
    load_rates,
    get_driver_name,
    get_data_path,
    set_data_dir,
    clear_data_dir,
    get_timesheets_path,
    open_store,
    ProfileNotFoundError,
    ProfileError,
)

from .schemas import (
    DayRecord,
    Rates,
    DEFAULT_RATES,
    parse_time,
)

from .day_calc import (
    DerivedDay,
    derive_day,
    hours_worked,
    normal_allowance_units,
    weekend_allowance_units,
    night_differential,
)

from .fiscal import (
    CUTOFF_DAY,
    FiscalWindow,
    fiscal_window,
    fiscal_window_for_payroll_date,
    shift_month,
    month_key,
    fiscal_month_label,
    date_range_label,
)

from .store import (
    MonthStore,
    JsonFileMonthStore,
    MemoryMonthStore,
    BucketDecodeResult,
    BucketKeyError,
    StoreConsistencyError,
    decode_bucket,
    read_bucket,
    write_bucket_merge,
    read_all_records,
)

from .timesheet import (
    Summary,
    FiscalMonthView,
    OutsideWindowError,
    load_fiscal_month,
    save_fiscal_month,
    update_day,
    set_day_fields,
    derive_days,
    summarize,
    fiscal_month_view,
)

from .annual import (
    AnnualSummary,
    annual_summary,
)

from .report import (
    ReportData,
    ReportRangeError,
    report_data,
    write_report_csv,
    save_report_csv,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_show_tips",
    "get_profile_path",
    "load_profile",
    "save_profile",
    "load_rates",
    "get_driver_name",
    "get_data_path",
    "set_data_dir",
    "clear_data_dir",
    "get_timesheets_path",
    "open_store",
    "ProfileNotFoundError",
    "ProfileError",
    # Schemas
    "DayRecord",
    "Rates",
    "DEFAULT_RATES",
    "parse_time",
    # Day calculator
    "DerivedDay",
    "derive_day",
    "hours_worked",
    "normal_allowance_units",
    "weekend_allowance_units",
    "night_differential",
    # Fiscal windows
    "CUTOFF_DAY",
    "FiscalWindow",
    "fiscal_window",
    "fiscal_window_for_payroll_date",
    "shift_month",
    "month_key",
    "fiscal_month_label",
    "date_range_label",
    # Store
    "MonthStore",
    "JsonFileMonthStore",
    "MemoryMonthStore",
    "BucketDecodeResult",
    "BucketKeyError",
    "StoreConsistencyError",
    "decode_bucket",
    "read_bucket",
    "write_bucket_merge",
    "read_all_records",
    # Fiscal month
    "Summary",
    "FiscalMonthView",
    "OutsideWindowError",
    "load_fiscal_month",
    "save_fiscal_month",
    "update_day",
    "set_day_fields",
    "derive_days",
    "summarize",
    "fiscal_month_view",
    # Annual
    "AnnualSummary",
    "annual_summary",
    # Report
    "ReportData",
    "ReportRangeError",
    "report_data",
    "write_report_csv",
    "save_report_csv",
]
