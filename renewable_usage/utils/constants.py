"""
Constants for the renewable usage report.

Column names, the energy source enumeration and the statistical constants
used by the aggregation and rendering code.
"""

# ============================================================================
# USAGE RECORD SCHEMA
# ============================================================================

COUNTRY = 'Country'
ENERGY_SOURCE = 'Energy_Source'
YEAR = 'Year'
HOUSEHOLD_SIZE = 'Household_Size'
MONTHLY_USAGE = 'Monthly_Usage_kWh'
COST_SAVINGS = 'Cost_Savings_USD'

REQUIRED_COLUMNS = [COUNTRY, ENERGY_SOURCE, YEAR, HOUSEHOLD_SIZE, MONTHLY_USAGE, COST_SAVINGS]
KEY_COLUMNS = [COUNTRY, ENERGY_SOURCE, YEAR, HOUSEHOLD_SIZE]
INTEGER_COLUMNS = [YEAR, HOUSEHOLD_SIZE]
MEASURE_COLUMNS = [MONTHLY_USAGE, COST_SAVINGS]

ENERGY_SOURCES = ['Solar', 'Wind', 'Hydro', 'Biomass', 'Geothermal']

# Expected ranges; values outside are logged, not rejected
MIN_YEAR = 2020
MAX_YEAR = 2024
MIN_HOUSEHOLD_SIZE = 1
MAX_HOUSEHOLD_SIZE = 8

# ============================================================================
# AGGREGATE ROW COLUMNS
# ============================================================================

MEAN_SAVINGS = 'Mean_Savings_USD'
MEAN_USAGE = 'Mean_Usage_kWh'
SD_USAGE = 'SD_Usage_kWh'
N_USAGE = 'N'
CI_LOWER = 'CI_Lower'
CI_UPPER = 'CI_Upper'
TOTAL_USAGE = 'Total_Usage_kWh'

# ============================================================================
# COORDINATE REFERENCE
# ============================================================================

CAPITAL = 'Capital'
LATITUDE = 'Latitude'
LONGITUDE = 'Longitude'
RESOLVED = 'Resolved'

COORDINATE_COLUMNS = [COUNTRY, LATITUDE, LONGITUDE]

# ============================================================================
# STATISTICS
# ============================================================================

DEFAULT_CONFIDENCE_Z = 1.96        # 95% normal approximation
MIN_CI_GROUP_SIZE = 2              # Sample SD is undefined below this

SUPPORTED_REDUCTIONS = ['mean', 'sum', 'std', 'count']

# ============================================================================
# OUTPUT
# ============================================================================

DEFAULT_DPI = 150
PLACEHOLDER_MESSAGE = "No data available"
SUMMARY_FILENAME = "report_summary.json"
