from datetime import datetime, timezone

import pytest

from search_api.app.domain.query.parameter_parser import (
    DEFAULT_EXAMPLE_FIELDS,
    SearchParameterParser,
    parse_bool_token,
    parse_date,
)
from search_api.app.platform.exceptions import ParameterValidationError, QueryTooLong


@pytest.fixture
def parse(schema, test_settings):
    def _parse(**raw):
        params = {k: v if isinstance(v, list) else [v] for k, v in raw.items()}
        return SearchParameterParser(params, schema, test_settings).parse()
    return _parse


def _errors(parse, **raw):
    with pytest.raises(ParameterValidationError) as ei:
        parse(**raw)
    return ei.value.errors


def test_defaults(parse):
    params = parse()

    assert params.query is None
    assert params.start == 0
    assert params.count == 10
    assert "title" in params.return_fields
    assert params.filters == []
    assert params.aggregates == {}
    assert params.debug.show_query is False


def test_query_strips_control_characters(parse):
    params = parse(q="tax\x00 disc\x1f")
    assert params.query == "tax disc"


def test_quoted_query_detected(parse):
    assert parse(q='  "tax disc" ').is_quoted_phrase is True
    assert parse(q="tax disc").is_quoted_phrase is False
    assert parse(q='"tax" "disc"').is_quoted_phrase is False


def test_too_long_query(parse):
    with pytest.raises(QueryTooLong):
        parse(q=" ".join(["word"] * 1025))


def test_start_and_count(parse):
    params = parse(start="20", count="50")
    assert (params.start, params.count) == (20, 50)


def test_invalid_numbers_collected(parse):
    errors = _errors(parse, start="-1", count="1000")
    assert any('"start"' in e for e in errors)
    assert any('"count"' in e for e in errors)


def test_unexpected_parameters(parse):
    errors = _errors(parse, foo="1", bar="2")
    assert errors == ["Unexpected parameters: bar, foo"]


def test_cache_buster_is_ignored(parse):
    assert parse(c="12345").query is None


def test_multiple_values_for_single_parameter(parse):
    errors = _errors(parse, q=["a", "b"])
    assert errors == ['Multiple values supplied for "q"']


def test_all_errors_are_reported(parse):
    """첫 오류에서 멈추지 않고 전부 모은다"""
    errors = _errors(parse, count="x", order="title", filter_title="x", debug="nope")
    assert len(errors) == 4


def test_order(parse):
    assert parse(order="-public_timestamp").order == ("public_timestamp", "desc")
    assert parse(order="popularity").order == ("popularity", "asc")
    assert _errors(parse, order="title") == ['"title" is not a valid sort field']


def test_fields(parse):
    params = parse(fields=["title,link", "title_with_highlighting"])
    assert params.return_fields == ["title", "link", "title_with_highlighting"]

    errors = _errors(parse, fields="title,fish")
    assert "fish" in errors[0]


def test_debug_flags(parse):
    params = parse(debug="disable_best_bets,show_query")
    assert params.debug.disable_best_bets is True
    assert params.debug.show_query is True
    assert params.debug.disable_popularity is False


def test_suggest_and_ab_tests(parse):
    params = parse(q="tax", suggest="spelling", ab_tests="synonyms:B,format_boosting:A")
    assert params.suggest_spelling is True
    assert params.synonym_b_variant is True
    assert params.ab_variant("format_boosting") == "A"

    assert _errors(parse, suggest="grammar") == ['Unknown suggest option "grammar"']
    assert "expected name:variant" in _errors(parse, ab_tests="synonyms")[0]


# ---- 필터 ----

def test_filter_and_reject(parse):
    params = parse(filter_organisations=["hmrc", "dvla", "hmrc"], reject_format="guide")

    by_field = {f.field_name: f for f in params.filters}
    assert by_field["organisations"].values == ["hmrc", "dvla"]
    assert by_field["organisations"].operation == "filter"
    assert by_field["organisations"].multivalued is True
    assert by_field["format"].operation == "reject"


def test_filter_on_unknown_or_text_field(parse):
    assert _errors(parse, filter_fish="x") == ['"fish" is not a valid filter field']
    assert _errors(parse, filter_title="x") == ['"title" is not a valid filter field']


@pytest.mark.parametrize("token, expected", [
    ("yes", True), ("true", True), ("1", True), ("0", False), ("no", False),
])
def test_boolean_filter_tokens(parse, token, expected):
    params = parse(filter_is_historic=token)
    assert params.filters[0].values == [expected]


def test_boolean_filter_rejects_unknown_token(parse):
    errors = _errors(parse, filter_is_historic="maybe")
    assert errors == ['Invalid boolean value "maybe" for field "is_historic"']


def test_date_range_filter(parse):
    params = parse(**{"filter_public_timestamp[after]": "2014-04-01",
                      "filter_public_timestamp[before]": "2014-05-01T10:00:00"})
    (date_filter,) = params.filters
    assert date_filter.after == datetime(2014, 4, 1)
    assert date_filter.before == datetime(2014, 5, 1, 10, 0)
    assert date_filter.is_range is True


def test_date_filter_errors(parse):
    assert "must use [before] or [after]" in _errors(parse, filter_public_timestamp="2014")[0]
    errors = _errors(parse, **{"filter_public_timestamp[after]": "not-a-date"})
    assert errors == ['Invalid after date "not-a-date" for field "public_timestamp"']
    errors = _errors(parse, **{"filter_format[after]": "2014-01-01"})
    assert "only supported for date fields" in errors[0]


# ---- 집계 ----

def test_aggregate_defaults(parse):
    params = parse(aggregate_organisations="10")
    request = params.aggregates["organisations"]
    assert request.requested == 10
    assert request.examples == 0
    assert request.example_scope == "global"
    assert request.order == "count"


def test_facet_prefix_and_options(parse):
    params = parse(facet_format="5,examples:3,example_scope:query,example_fields:link:title,order:value")
    request = params.aggregates["format"]
    assert request.examples == 3
    assert request.example_scope == "query"
    assert request.example_fields == ["link", "title"]
    assert request.order == "value"


def test_aggregate_examples_default_fields(parse):
    request = parse(aggregate_format="5,examples:2").aggregates["format"]
    assert request.example_fields == list(DEFAULT_EXAMPLE_FIELDS)


def test_aggregate_limits(parse):
    errors = _errors(parse, aggregate_format="51,examples:6")
    assert len(errors) == 2


def test_aggregate_invalid_options(parse):
    errors = _errors(parse, aggregate_format="x")
    assert errors == ['Invalid aggregate count "x" for field "format"']
    errors = _errors(parse, aggregate_format="5,colour:red")
    assert errors == ['Unknown aggregate option "colour" for field "format"']
    errors = _errors(parse, aggregate_title="5")
    assert errors == ['"title" is not a valid aggregate field']


# ---- helpers ----

def test_parse_bool_token():
    assert parse_bool_token(" Y ") is True
    assert parse_bool_token("f") is False
    assert parse_bool_token("perhaps") is None


def test_parse_date():
    assert parse_date("2020-02-03") == datetime(2020, 2, 3)
    assert parse_date("03/02/2020") is None


def test_parse_date_accepts_utc_suffix():
    expected = datetime(2020, 2, 3, 10, 30, tzinfo=timezone.utc)
    assert parse_date("2020-02-03T10:30:00Z") == expected
    assert parse_date("2020-02-03T10:30:00+00:00") == expected
