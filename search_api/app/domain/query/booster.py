"""
점수 부스트(function_score).

모든 부스트는 독립적인 곱셈 인자:
- 포맷별 가중치(설정 파일)
- 최신 공지(announcement) 시간 부스트
- 폐쇄/이양 기관, 역사적 문서 감점
- (format_boosting=B) guidance 상위 타입 부스트
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable

from search_api.app.domain.query.parameters import QueryParameters

JSONDict = dict[str, Any]

DEFAULT_BOOST = 1

TIME_BOOST_SCRIPT = (
    "(0.05 / ((3.16 * Math.pow(10, -11)) * "
    "Math.abs(params.now - doc['public_timestamp'].value.toInstant().toEpochMilli()) "
    "+ 0.05)) + 0.12"
)


def load_format_boosts(path: str) -> JSONDict:
    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)
    config.setdefault("format_boosts", {})
    config.setdefault("government_index", {"boost": DEFAULT_BOOST, "formats": []})
    return config


def time_in_millis_to_nearest_minute(clock: Callable[[], float] = time.time) -> int:
    return (int(clock()) // 60) * 60000


def formats_boosted_by_index(config: JSONDict) -> dict[str, float]:
    """정부 인덱스 포맷 전체 가중치 × 포맷별 가중치"""
    government = config["government_index"]
    government_boost = government.get("boost", DEFAULT_BOOST)
    government_formats = government.get("formats", [])
    individual = config["format_boosts"]

    boosted = {}
    for format_name in dict.fromkeys(list(government_formats) + list(individual)):
        index_boost = government_boost if format_name in government_formats else DEFAULT_BOOST
        boosted[format_name] = index_boost * individual.get(format_name, DEFAULT_BOOST)
    return boosted


def boosted_formats(params: QueryParameters, config: JSONDict) -> dict[str, float]:
    if params.ab_variant("format_boosting") == "B":
        return dict(config["format_boosts"])
    return formats_boosted_by_index(config)


def _weight(term: JSONDict, weight: float) -> JSONDict:
    return {"filter": {"term": term}, "weight": weight}


def time_boost(now_millis: int) -> JSONDict:
    return {
        "filter": {"term": {"search_format_types": "announcement"}},
        "script_score": {
            "script": {
                "source": TIME_BOOST_SCRIPT,
                "params": {"now": now_millis},
            }
        },
    }


def boost_functions(params: QueryParameters, config: JSONDict,
                    clock: Callable[[], float] = time.time) -> list[JSONDict]:
    functions = [
        _weight({"format": fmt}, boost)
        for fmt, boost in boosted_formats(params, config).items()
    ]
    functions += [
        time_boost(time_in_millis_to_nearest_minute(clock)),
        _weight({"organisation_state": "closed"}, 0.2),
        _weight({"organisation_state": "devolved"}, 0.3),
        _weight({"is_historic": True}, 0.5),
    ]
    if params.ab_variant("format_boosting") == "B":
        functions.append(_weight({"navigation_document_supertype": "guidance"}, 2.5))
    return functions


def wrap(core: JSONDict, params: QueryParameters, config: JSONDict,
         clock: Callable[[], float] = time.time) -> JSONDict:
    """
    Args:
        core: core_query 결과
        params: 검색 파라미터
        config: load_format_boosts 결과
        clock: 현재 시각(epoch 초)을 돌려주는 함수
    Returns:
        JSONDict: function_score 쿼리 (disable_boosting이면 core 그대로)
    """
    if params.debug.disable_boosting:
        return core
    return {
        "function_score": {
            "boost_mode": "multiply",
            "score_mode": "multiply",
            "query": {"bool": {"should": [core]}},
            "functions": boost_functions(params, config, clock),
        }
    }
