import json
from unittest.mock import MagicMock

from search_api.app.domain.query import best_bets
from search_api.app.domain.query.best_bets import BestBetsChecker


def _bet(exact=None, stemmed=None, best=(), worst=()):
    source = {
        "details": json.dumps({
            "best_bets": [{"link": link, "position": pos} for link, pos in best],
            "worst_bets": [{"link": link} for link in worst],
        })
    }
    if exact is not None:
        source["exact_query"] = exact
    if stemmed is not None:
        source["stemmed_query_as_term"] = stemmed
    return {"_source": source}


def _checker(hits, analyzed_tokens):
    searcher = MagicMock()
    searcher.analyze.return_value = analyzed_tokens
    searcher.raw_search.return_value = {"hits": {"hits": hits}}
    return BestBetsChecker(searcher, "metasearch"), searcher


def test_exact_bets_take_precedence():
    checker, _ = _checker([
        _bet(exact="cheese", best=[("/exact", 1)]),
        _bet(stemmed=" chees ", best=[("/stemmed", 1)]),
    ], ["chees"])

    best, worst = checker.bets("cheese")
    assert best == [("/exact", 1)]
    assert worst == []


def test_exact_match_is_case_insensitive():
    checker, _ = _checker([_bet(exact="jobs", best=[("/jobsearch", 1)])], ["job"])
    assert checker.bets("JOBS")[0] == [("/jobsearch", 1)]


def test_stemmed_bet_must_appear_in_order():
    hits = [_bet(stemmed=" tax disc ", best=[("/vehicle-tax", 1)])]

    checker, _ = _checker(hits, ["renew", "tax", "disc"])
    assert checker.bets("renew tax disc")[0] == [("/vehicle-tax", 1)]

    checker, _ = _checker(hits, ["disc", "tax"])
    assert checker.bets("disc tax")[0] == []


def test_stemmed_bet_needs_whole_tokens():
    checker, _ = _checker([_bet(stemmed=" tax ", best=[("/tax", 1)])], ["taxi"])
    assert checker.bets("taxi")[0] == []


def test_lowest_position_wins_and_worst_excluded_when_best():
    checker, _ = _checker([
        _bet(exact="pie", best=[("/a", 3), ("/b", 2)], worst=["/c", "/a"]),
        _bet(exact="pie", best=[("/a", 1)]),
    ], ["pie"])

    best, worst = checker.bets("pie")
    assert best == [("/a", 1), ("/b", 2)]
    assert worst == ["/c"]


def test_lookup_query_uses_metasearch_index():
    checker, searcher = _checker([], ["pie"])
    checker.bets(" Pie ")

    searcher.analyze.assert_called_once_with("Pie", best_bets.STEMMED_ANALYZER, "metasearch")
    payload = searcher.raw_search.call_args.args[0]
    assert searcher.raw_search.call_args.kwargs["index"] == "metasearch"
    bool_query = payload["query"]["bool"]
    assert bool_query["filter"] == [{"term": {"document_type": "best_bet"}}]
    assert {"term": {"exact_query": "pie"}} in bool_query["should"]
    assert {"match": {"stemmed_query_as_term": "pie"}} in bool_query["should"]


def test_empty_query_skips_lookup():
    checker, searcher = _checker([], [])
    assert checker.bets("  ") == ([], [])
    searcher.raw_search.assert_not_called()


def test_unparseable_details_are_skipped():
    checker, _ = _checker([{"_source": {"exact_query": "pie", "details": "{oops"}}], ["pie"])
    assert checker.bets("pie") == ([], [])


def test_wrap_boosts_by_position():
    core = {"match_all": {}}
    wrapped = best_bets.wrap(core, [("/a", 1), ("/b", 2), ("/c", 2)], ["/bad"])

    should = wrapped["bool"]["should"]
    assert should[0] is core
    assert should[1] == {"constant_score": {"filter": {"terms": {"link": ["/a"]}}, "boost": 1_000_000}}
    assert should[2] == {"constant_score": {"filter": {"terms": {"link": ["/b", "/c"]}}, "boost": 500_000}}
    assert wrapped["bool"]["must_not"] == [{"terms": {"link": ["/bad"]}}]


def test_wrap_without_bets_returns_query():
    core = {"match_all": {}}
    assert best_bets.wrap(core, [], []) is core


def test_stemmed_query_as_term():
    searcher = MagicMock()
    searcher.analyze.return_value = ["tax", "disc"]
    assert best_bets.stemmed_query_as_term(searcher, "Tax Discs") == " tax disc "


def test_pie_bets_pin_and_suppress():
    checker, _ = _checker([_bet(exact="pie", best=[("/pies", 1)], worst=["/bad-pie"])], ["pie"])
    best, worst = checker.bets("pie")

    wrapped = best_bets.wrap({"match": {"title": "pie"}}, best, worst)
    pinned = wrapped["bool"]["should"][1]["constant_score"]
    assert pinned["filter"] == {"terms": {"link": ["/pies"]}}
    assert pinned["boost"] == best_bets.BEST_BET_BOOST
    assert wrapped["bool"]["must_not"] == [{"terms": {"link": ["/bad-pie"]}}]
