from datetime import timezone
from decimal import Decimal

UTC = timezone.utc

KEY_PREFIX = "sharethebill"
BILL_KEY_PREFIX = f"{KEY_PREFIX}:bill:"
USER_BILLS_KEY_PREFIX = f"{KEY_PREFIX}:user_bills:"
BILL_PARTICIPANTS_KEY_PREFIX = f"{KEY_PREFIX}:bill_participants:"
USER_PROFILE_KEY_PREFIX = f"{KEY_PREFIX}:user_profile:"

# Tolerance for amount comparisons, in minor units (0.01 currency units).
AMOUNT_EPSILON = 1
PERCENT_EPSILON = Decimal("0.01")

METADATA_FIELDS = ("title", "description", "status", "due_date", "tags")
