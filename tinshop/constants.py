# tinshop/constants.py

APP_NAME = "Tin Shop Manager"

# Storage
DATA_DIR = "data"
DB_FILE_NAME = "tinshop.db"
LOG_DIR = "logs"
TABLE_SCHEMA_VERSION = "schema_version"
TABLE_DOCUMENTS = "documents"
SCHEMA_VERSION = "1.0.0"

# Document keys (suffixes are migration markers, the core never parses them)
KEY_INVENTORY = "inventory_v4"
KEY_STOCK_LOGS = "stock_logs_v1"
KEY_SALES = "sales_v3"
KEY_SETTINGS = "store_settings"
KEY_EXPENSES = "expenses_v1"
KEY_ACTIVITY_LOGS = "activity_logs_v1"
KEY_EMPLOYEES = "employees_v1"
KEY_SALARY_RECORDS = "salary_records_v1"
KEY_ATTENDANCE = "attendance_v1"

# Calculation modes
MODE_BUNDLE_TIN = "tin_bundle"
MODE_RUNNING_FOOT = "running_foot"
MODE_FIXED_PIECE = "fixed_piece"
CALCULATION_MODES = (MODE_BUNDLE_TIN, MODE_RUNNING_FOOT, MODE_FIXED_PIECE)

# Units a quantity can be entered in
UNIT_BUNDLE = "bundle"
UNIT_PIECE = "piece"
QUANTITY_UNITS = (UNIT_BUNDLE, UNIT_PIECE)

# Line items with this group id have no inventory linkage
MANUAL_GROUP_ID = "manual"

DEFAULT_CALCULATION_BASE = 72.0
FIRST_INVOICE_ID = 1001
OPENING_DUE_INVOICE_ID = "OLD"
MIN_PHONE_DIGITS = 11

DELIVERY_DELIVERED = "delivered"
DELIVERY_PENDING = "pending"
DELIVERY_STATUSES = (DELIVERY_DELIVERED, DELIVERY_PENDING)

EXPENSE_CATEGORIES = ("transport", "food", "utility", "salary", "other")

# Payroll
PAYMENT_SALARY = "salary"
PAYMENT_ADVANCE = "advance"
SALARY_PAYMENT_TYPES = (PAYMENT_SALARY, PAYMENT_ADVANCE)
ATTENDANCE_PRESENT = "present"
ATTENDANCE_ABSENT = "absent"
ATTENDANCE_LATE = "late"
ATTENDANCE_STATUSES = (ATTENDANCE_PRESENT, ATTENDANCE_ABSENT, ATTENDANCE_LATE)
DEFAULT_DESIGNATION = "Staff"

# Catalog option lists kept in store settings
CATALOG_LISTS = ("brands", "colors", "thicknesses", "productTypes")

# Ledger view thresholds
LEDGER_DUE_TOLERANCE = 1.0
LEDGER_CREDIT_HISTORY_TOLERANCE = 5.0
