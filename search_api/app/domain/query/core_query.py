"""
핵심 텍스트 매칭 절.

- 따옴표로 감싼 구문: 가중치 필드별 match_phrase 중 최고 점수(dis_max)
- 일반 검색어: all_searchable_text에 minimum_should_match 적용 + 가중치 should 절
- similar_to: more_like_this
- 검색어 없음: match_all
"""

from __future__ import annotations

from typing import Any, Optional

from search_api.app.domain.query.parameters import QueryParameters

JSONDict = dict[str, Any]

DEFAULT_QUERY_ANALYZER = "query_with_old_synonyms"
DEFAULT_QUERY_ANALYZER_WITHOUT_SYNONYMS = "default"
SHINGLED_QUERY_ANALYZER = "shingled_query_analyzer"

SEARCHABLE_TEXT_FIELD = "all_searchable_text"

MATCH_FIELDS = {
    "title": 5,
    # 기관은 약어 검색에서 상위에 나와야 한다
    "acronym": 5,
    "description": 2,
    "indexable_content": 1,
}

# "N<M": 선택 절이 N개보다 많으면 M개가 일치해야 한다.
#
# 선택 절 수 | 필요 일치 수
# 1         | 1
# 2         | 2
# 3         | 2
# 4 ~ 7     | 3
# 8 이상     | 50%
MINIMUM_SHOULD_MATCH = "2<2 3<3 7<50%"
MINIMUM_SHOULD_MATCH_VARIANT_B = "2<2"

PHRASE_TIE_BREAKER = 0.1


def minimum_should_match(params: QueryParameters) -> str:
    if params.ab_variant("search_match_length") == "B":
        return MINIMUM_SHOULD_MATCH_VARIANT_B
    return MINIMUM_SHOULD_MATCH


def minimum_should_match_count(clauses: int, variant: Optional[str] = None) -> int:
    """
    minimum_should_match 문자열이 선택 절 clauses개 중 몇 개의 일치를 요구하는지 계산한다.
    Args:
        clauses: 선택 절(검색어 토큰) 수
        variant: search_match_length A/B 변형("B"면 2<2)
    Returns:
        int: 필요 일치 수
    """
    if clauses <= 0:
        return 0
    rule = MINIMUM_SHOULD_MATCH_VARIANT_B if variant == "B" else MINIMUM_SHOULD_MATCH
    required = clauses
    for clause in rule.split():
        threshold, _, value = clause.partition("<")
        if clauses > int(threshold):
            if value.endswith("%"):
                required = clauses * int(value[:-1]) // 100
            else:
                required = int(value)
    return max(1, min(required, clauses))


def query_analyzer(params: QueryParameters) -> str:
    if params.debug.disable_synonyms:
        return DEFAULT_QUERY_ANALYZER_WITHOUT_SYNONYMS
    return DEFAULT_QUERY_ANALYZER


def search_term(params: QueryParameters) -> str:
    term = (params.query or "").strip()
    if params.is_quoted_phrase:
        term = term.strip('"').strip()
    return term


def dis_max(queries: list[JSONDict], tie_breaker: float = 0.0) -> JSONDict:
    # 가장 높은 점수를 쓰고, 나머지 점수는 tie_breaker 비율만큼 더한다
    if len(queries) == 1:
        return queries[0]
    return {"dis_max": {"queries": queries, "tie_breaker": tie_breaker}}


def quoted_phrase_query(params: QueryParameters) -> JSONDict:
    term = search_term(params)
    return dis_max(
        [
            {"match_phrase": {f"{field}.no_stop": {"query": term, "boost": boost}}}
            for field, boost in MATCH_FIELDS.items()
        ],
        tie_breaker=PHRASE_TIE_BREAKER,
    )


def searchable_text_query(params: QueryParameters) -> JSONDict:
    term = search_term(params)
    if params.synonym_b_variant:
        return {
            "match": {
                f"{SEARCHABLE_TEXT_FIELD}.synonym": {
                    "query": term,
                    "minimum_should_match": minimum_should_match(params),
                }
            }
        }
    return {
        "match": {
            SEARCHABLE_TEXT_FIELD: {
                "query": term,
                "analyzer": query_analyzer(params),
                "minimum_should_match": minimum_should_match(params),
            }
        }
    }


def must_conditions(params: QueryParameters) -> list[JSONDict]:
    if not params.debug.use_id_codes:
        return [searchable_text_query(params)]
    id_codes = {
        "match": {
            f"{SEARCHABLE_TEXT_FIELD}.id_codes": {
                "query": search_term(params),
                "minimum_should_match": "1",
            }
        }
    }
    return [dis_max([searchable_text_query(params), id_codes], tie_breaker=0.1)]


def should_conditions(params: QueryParameters) -> list[JSONDict]:
    term = search_term(params)
    analyzer = query_analyzer(params)
    exact_field_boosts = [
        {"match_phrase": {field: {"query": term, "analyzer": analyzer}}}
        for field in MATCH_FIELDS
    ]
    exact_match_boost = {
        "multi_match": {
            "query": term,
            "operator": "and",
            "fields": list(MATCH_FIELDS),
            "analyzer": analyzer,
        }
    }
    shingle_boost = {
        "multi_match": {
            "query": term,
            "operator": "or",
            "fields": list(MATCH_FIELDS),
            "analyzer": SHINGLED_QUERY_ANALYZER,
        }
    }
    return exact_field_boosts + [exact_match_boost, shingle_boost]


def unquoted_phrase_query(params: QueryParameters) -> JSONDict:
    return {"bool": {"must": must_conditions(params), "should": should_conditions(params)}}


def more_like_this_query(params: QueryParameters) -> JSONDict:
    return {
        "more_like_this": {
            "like": [{"_id": params.similar_to}],
            "min_doc_freq": 0,
        }
    }


def core_query(params: QueryParameters) -> JSONDict:
    if params.similar_to:
        return more_like_this_query(params)
    if not params.has_query:
        return {"match_all": {}}
    if params.is_quoted_phrase:
        return quoted_phrase_query(params)
    return unquoted_phrase_query(params)
