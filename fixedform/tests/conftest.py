"""Pytest configuration and shared fixtures.

Provides reusable test fixtures for:
- The receipt template/input pair and its expected tree
- An items table with a header and a trailing total line
- A clean global logger for every test
"""

from decimal import Decimal

import pytest

from fixedform.core.conversion_logger import reset_logger


# =============================================================================
# Logger isolation
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_logger():
    """Every test starts and ends without a configured global logger."""
    reset_logger()
    yield
    reset_logger()


# =============================================================================
# Receipt
# =============================================================================


@pytest.fixture
def receipt_template():
    """Template for a small retail receipt."""
    return """
{RetailerName:wordwithspace}
{InvoiceDateTime:datetime:dd-MM-yyyy H:mm}
{Address:wordwithspace | prefix('ADDRESS:-')}
{BillNumber:wordwithspace}
Item Rate Qty Total
{Items[].ItemName:word} {Items[].Rate:number} {Items[].Quantity:integer} {Items[].Total:number}
Total Amount {TotalAmount:number}
Total Item {coalesce(TotalItem, RetailerName) | upper():wordwithspace}
"""


@pytest.fixture
def receipt_input():
    """Receipt text matching receipt_template."""
    return """
ABC Retailer
15-09-2025 3:45
NY,Pal Road, ZN
Bill Num 20084
Item Rate Qty Total
Item1 34 4 136
Item2 55 2 110
Total Amount 246
Total Item 2
Thank You
"""


@pytest.fixture
def receipt_expected():
    """Tree extracted from receipt_input."""
    return {
        "RetailerName": "ABC Retailer",
        "InvoiceDateTime": "2025-09-15T03:45:00",
        "Address": "ADDRESS:-NY,Pal Road, ZN",
        "BillNumber": "Bill Num 20084",
        "Items": [
            {"ItemName": "Item1", "Rate": Decimal("34"), "Quantity": 4, "Total": Decimal("136")},
            {"ItemName": "Item2", "Rate": Decimal("55"), "Quantity": 2, "Total": Decimal("110")},
        ],
        "TotalAmount": Decimal("246"),
        "TotalItem": "ABC RETAILER",
    }


# =============================================================================
# Items table
# =============================================================================


@pytest.fixture
def items_template():
    """Header line, one array row, and a closing literal."""
    return """
Item Rate Qty Total
{Items[].ItemName:word} {Items[].Rate:number} {Items[].Quantity:integer} {Items[].Total:number}
Thank You
"""


@pytest.fixture
def items_input():
    """Two item rows between the header and the closing line."""
    return """
Item Rate Qty Total
Item1 34 4 136
Item2 55 2 110
Thank You
"""


@pytest.fixture
def items_tree():
    """Tree holding the two items, as the converter produces it."""
    return {
        "Items": [
            {"ItemName": "Item1", "Rate": Decimal("34"), "Quantity": 4, "Total": Decimal("136")},
            {"ItemName": "Item2", "Rate": Decimal("55"), "Quantity": 2, "Total": Decimal("110")},
        ],
        "RetailerName": "ABC Retailer",
    }
