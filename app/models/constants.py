"""Domain constants for display and validation."""

from typing import Dict

# Display names for the converter page; codes outside this map render bare
CURRENCY_NAMES: Dict[str, str] = {
    "USD": "US Dollar",
    "INR": "Indian Rupee",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "AED": "UAE Dirham",
}
