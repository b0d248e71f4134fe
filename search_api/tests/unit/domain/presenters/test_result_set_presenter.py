from search_api.app.domain.presenters.aggregates import AggregatesPresenter
from search_api.app.domain.presenters.entity_expander import EntityExpander
from search_api.app.domain.presenters.result_set import ResultSetPresenter
from search_api.app.domain.presenters.spell_check import SpellCheckPresenter
from search_api.app.domain.query.parameters import AggregateRequest, DebugFlags


def _hit(link):
    return {"_index": "mainstream", "_id": link, "_score": 1.0,
            "_source": {"link": link, "title": link.strip("/"), "format": "guide"}}


def _response(total=2, hits=None, aggregations=None, suggest=None):
    response = {"hits": {"total": {"value": total}, "hits": hits or []}}
    if aggregations is not None:
        response["aggregations"] = aggregations
    if suggest is not None:
        response["suggest"] = suggest
    return response


def test_count_one_with_two_matches(schema, make_params):
    params = make_params(count=1, return_fields=["link"])
    presented = ResultSetPresenter(params, _response(total=2, hits=[_hit("/a")]), schema).present()

    assert presented["total"] == 2
    assert [r["link"] for r in presented["results"]] == ["/a"]
    assert presented["start"] == 0
    assert presented["aggregates"] == {}
    assert presented["suggested_queries"] == []
    assert "search_query" not in presented


def test_show_query_includes_payload(schema, make_params):
    params = make_params(debug=DebugFlags(show_query=True))
    payload = {"query": {"match_all": {}}}
    presented = ResultSetPresenter(params, _response(), schema, query_payload=payload).present()
    assert presented["search_query"] == payload


def test_empty_response(schema, make_params):
    presented = ResultSetPresenter(make_params(), {}, schema).present()
    assert presented["results"] == []
    assert presented["total"] == 0


# ---- aggregates ----

def _aggregations():
    return {"format": {
        "doc_count": 10,
        "filtered_aggregations": {"buckets": [
            {"key": "guide", "doc_count": 6},
            {"key": "answer", "doc_count": 3},
            {"key": "speech", "doc_count": 1},
        ]},
        "missing_aggregation": {"doc_count": 4},
        "option_count": {"value": 5},
    }}


def test_aggregates_presenter(make_params):
    params = make_params(aggregates={"format": AggregateRequest(field_name="format", requested=2)})
    examples = {"format": {"guide": {"total": 6, "examples": [{"link": "/g"}]}}}
    presented = AggregatesPresenter(_aggregations(), examples, params, EntityExpander({})).present()

    fmt = presented["format"]
    assert fmt["options"] == [
        {"value": {"slug": "guide", "example_info": {"total": 6, "examples": [{"link": "/g"}]}},
         "documents": 6},
        {"value": {"slug": "answer"}, "documents": 3},
    ]
    assert fmt["documents_with_no_value"] == 4
    assert fmt["total_options"] == 5
    assert fmt["missing_options"] == 3
    assert fmt["scope"] == "exclude_field_filter"


def test_aggregates_presenter_missing_response(make_params):
    params = make_params(aggregates={"format": AggregateRequest(field_name="format", requested=2)})
    presented = AggregatesPresenter(None, {}, params, EntityExpander({})).present()
    assert presented["format"]["options"] == []
    assert presented["format"]["total_options"] == 0
    assert presented["format"]["missing_options"] == 0


# ---- spell check ----

def test_spell_check_presenter_orders_by_score():
    suggest = {"spelling_suggestions": [
        {"text": "tax", "options": []},
        {"text": "dsic", "options": [{"text": "disc", "score": 0.5},
                                     {"text": "disk", "score": 0.75}]},
        {"text": "forn", "options": [{"text": "form", "score": 0.9}]},
    ]}
    assert SpellCheckPresenter(suggest).present() == ["form", "disk"]


def test_spell_check_presenter_without_suggest():
    assert SpellCheckPresenter(None).present() == []
