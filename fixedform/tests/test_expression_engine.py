"""Tests for fixedform.core.expression_engine module.

Tests evaluation against a tree:
- value_at path resolution and array projection
- Functions (coalesce, concat, sum, count, valueof, join)
- Pipe steps, applied left to right
- Seeded pipelines and unknown names
"""

from decimal import Decimal

import pytest

from fixedform.core.expression_engine import evaluate_pipeline, value_at


# =============================================================================
# value_at tests
# =============================================================================


class TestValueAt:
    """Tests for path resolution."""

    def test_top_level(self, items_tree):
        """Plain keys resolve."""
        assert value_at(items_tree, "RetailerName") == "ABC Retailer"

    def test_nested(self):
        """Dotted paths walk objects."""
        assert value_at({"A": {"B": {"C": 1}}}, "A.B.C") == 1

    def test_array(self, items_tree):
        """A bare array path yields the array."""
        assert value_at(items_tree, "Items[]") is items_tree["Items"]

    def test_projection(self, items_tree):
        """Fields after the marker are projected over every element."""
        assert value_at(items_tree, "Items[].Total") == [Decimal("136"), Decimal("110")]

    def test_projection_skips_missing(self):
        """Elements without the field are skipped."""
        tree = {"Items": [{"Total": 1}, {"Name": "x"}, "scalar", {"Total": 3}]}
        assert value_at(tree, "Items[].Total") == [1, 3]

    def test_missing_yields_none(self, items_tree):
        """Missing keys never raise."""
        assert value_at(items_tree, "Nope") is None
        assert value_at(items_tree, "RetailerName.Deeper") is None
        assert value_at(items_tree, "Nope[].Total") is None
        assert value_at(items_tree, "") is None

    def test_bracket_contents_are_literal_keys(self):
        """Non-empty brackets are part of the key, not an index."""
        assert value_at({"Items[0]": "k"}, "Items[0]") == "k"


# =============================================================================
# Function tests
# =============================================================================


class TestFunctions:
    """Tests for tree functions."""

    def test_sum(self, items_tree):
        """sum() adds a projected array."""
        assert evaluate_pipeline("sum(Items[].Total)", items_tree) == Decimal("246")

    def test_count(self, items_tree):
        """count() counts array elements."""
        assert evaluate_pipeline("count(Items[])", items_tree) == 2

    def test_sum_with_quoted_path(self, items_tree):
        """A quoted path string names the array too."""
        assert evaluate_pipeline("sum('Items[].Quantity')", items_tree) == Decimal("6")

    def test_sum_of_scalars(self):
        """Without an array, scalar arguments are added."""
        assert evaluate_pipeline("sum(A, B, 2.5)", {"A": "1", "B": Decimal("2")}) == Decimal("5.5")

    def test_sum_missing_array_is_zero(self):
        """A missing array sums to zero."""
        assert evaluate_pipeline("sum(Items[].Total)", {}) == Decimal("0")

    def test_count_missing_is_zero(self):
        """A missing array counts as empty."""
        assert evaluate_pipeline("count(Items[])", {}) == 0

    def test_coalesce_first_non_blank(self):
        """The first non-blank argument wins."""
        tree = {"TotalItem": "2", "RetailerName": "ABC"}
        assert evaluate_pipeline("coalesce(TotalItem, RetailerName)", tree) == "2"

    def test_coalesce_falls_back(self):
        """Blank and missing arguments are skipped."""
        tree = {"TotalItem": "  ", "RetailerName": "ABC"}
        assert evaluate_pipeline("coalesce(TotalItem, RetailerName)", tree) == "ABC"
        assert evaluate_pipeline("coalesce(Missing, RetailerName)", tree) == "ABC"

    def test_coalesce_all_blank(self):
        """No usable argument yields None."""
        assert evaluate_pipeline("coalesce(A, B)", {}) is None

    def test_concat(self):
        """Arguments are concatenated as text."""
        tree = {"First": "Ann", "Age": Decimal("30")}
        assert evaluate_pipeline("concat(First, ' ', Age, Missing)", tree) == "Ann 30"

    def test_valueof_path_and_quoted_path(self, items_tree):
        """valueof resolves a path or a quoted path string."""
        assert evaluate_pipeline("valueof(RetailerName)", items_tree) == "ABC Retailer"
        assert evaluate_pipeline("valueof('RetailerName')", items_tree) == "ABC Retailer"

    def test_join_default_separator(self, items_tree):
        """join() uses ', ' by default."""
        assert evaluate_pipeline("join(Items[].ItemName)", items_tree) == "Item1, Item2"

    def test_join_custom_separator(self, items_tree):
        """join() takes a separator argument."""
        assert evaluate_pipeline("join(Items[].Total, ' + ')", items_tree) == "136 + 110"

    def test_function_names_case_insensitive(self, items_tree):
        """Function names ignore case."""
        assert evaluate_pipeline("SUM(Items[].Total)", items_tree) == Decimal("246")

    def test_unknown_function_yields_none(self, items_tree):
        """Unknown functions never raise."""
        assert evaluate_pipeline("median(Items[].Total)", items_tree) is None

    def test_nested_functions(self, items_tree):
        """Function results can feed other functions."""
        assert evaluate_pipeline("concat('n=', count(Items[]))", items_tree) == "n=2"


# =============================================================================
# Pipe step tests
# =============================================================================


class TestPipes:
    """Tests for pipe steps."""

    @pytest.mark.parametrize("expression,expected", [
        ("'Abc' | upper()", "ABC"),
        ("'Abc' | lower()", "abc"),
        ("'  x  ' | trim()", "x"),
        ("'a-b-c' | replace('-', '/')", "a/b/c"),
        ("'abc' | suffix('!')", "abc!"),
        ("'abc' | concat('!')", "abc!"),
        ("'abc' | prefix('X-')", "X-abc"),
        ("'abc' | prefix(\"X-\")", "X-abc"),
        ("'' | default('none')", "none"),
        ("'v' | default('none')", "v"),
        ("Missing | coalesce('none')", "none"),
        ("' 12.50 ' | tonumber()", Decimal("12.50")),
        ("'12.9' | toint()", 12),
        ("'-12.9' | toint()", -12),
        ("'abc' | tonumber()", "abc"),
        ("'abc' | toint()", "abc"),
        ("'15-09-2025 3:45' | format('yyyy/MM/dd HH:mm')", "2025/09/15 03:45"),
        ("'2025-09-15 03:45' | dateformat('dd/MM/yyyy HH:mm')", "15/09/2025 03:45"),
        ("'soon' | format('yyyy')", "soon"),
        ("'abc' | frobnicate()", "abc"),
    ])
    def test_step(self, expression, expected):
        """Each step transforms the running value."""
        assert evaluate_pipeline(expression, {}) == expected

    def test_toint_leaves_exponent_text_unchanged(self):
        """Exponent notation is not a number, so toint() passes it through."""
        assert evaluate_pipeline("'1e30' | toint()", {}) == "1e30"

    def test_toint_on_large_decimal(self):
        """Large Decimals truncate without hitting the context precision."""
        assert evaluate_pipeline("Big | toint()", {"Big": Decimal("1E+30")}) == 10 ** 30

    def test_toint_on_oversized_decimal_is_unchanged(self):
        """A value too long for an int is returned as it was."""
        big = Decimal("1E+5000")
        assert evaluate_pipeline("Big | toint()", {"Big": big}) == big

    def test_prefix_argument_is_never_a_path(self):
        """prefix() takes its argument literally even when it names a key."""
        assert evaluate_pipeline("'x' | prefix(Name)", {"Name": "Ann"}) == "Namex"

    def test_suffix_argument_can_be_a_path(self):
        """suffix() resolves path arguments."""
        assert evaluate_pipeline("'x' | suffix(Name)", {"Name": "Ann"}) == "xAnn"

    def test_default_argument_can_be_a_path(self):
        """default() resolves path arguments."""
        assert evaluate_pipeline("Missing | default(Name)", {"Name": "Ann"}) == "Ann"

    def test_upper_of_none_stays_none(self):
        """Text steps leave a missing value missing."""
        assert evaluate_pipeline("Missing | upper() | trim()", {}) is None

    def test_step_names_case_insensitive(self):
        """Pipe step names ignore case."""
        assert evaluate_pipeline("'abc' | UPPER()", {}) == "ABC"

    def test_replace_empty_old_is_noop(self):
        """Replacing the empty string changes nothing."""
        assert evaluate_pipeline("'abc' | replace('', 'x')", {}) == "abc"


# =============================================================================
# Pipeline order and seeding
# =============================================================================


class TestPipelines:
    """Tests for whole pipelines."""

    def test_left_to_right(self):
        """upper then prefix gives X-ABC, not X-abc uppercased."""
        assert evaluate_pipeline("Name | upper() | prefix('X-')", {}, seed="abc") == "X-ABC"

    def test_order_matters(self):
        """prefix then upper uppercases the prefix too."""
        assert evaluate_pipeline("Name | prefix('x-') | upper()", {}, seed="abc") == "X-ABC"
        assert evaluate_pipeline("Name | upper() | prefix('x-')", {}, seed="abc") == "x-ABC"

    def test_seed_replaces_path(self):
        """The captured value wins over the tree value for a path seed."""
        assert evaluate_pipeline("Name | upper()", {"Name": "tree"}, seed="captured") == "CAPTURED"

    def test_function_seed_evaluated_from_tree(self):
        """A function seed ignores the captured value."""
        tree = {"RetailerName": "ABC Retailer"}
        result = evaluate_pipeline("coalesce(TotalItem, RetailerName) | upper()", tree, seed="2")
        assert result == "ABC RETAILER"

    def test_empty_seed_is_still_a_seed(self):
        """An empty captured string replaces the path seed."""
        assert evaluate_pipeline("Name | default('none')", {"Name": "tree"}, seed="") == "none"

    def test_no_seed_reads_tree(self):
        """Without a seed the path is resolved."""
        assert evaluate_pipeline("Name | upper()", {"Name": "tree"}) == "TREE"
