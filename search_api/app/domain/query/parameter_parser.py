"""
검색 요청 파라미터 파서.

원시 쿼리스트링(이름 → 문자열 list)을 검증해 QueryParameters로 바꾼다.
검증 실패는 첫 번째에서 멈추지 않고 모두 모아 ParameterValidationError로 던진다.
부수효과 없음.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from search_api.app.domain.models import FieldDefinition, IndexSchema
from search_api.app.domain.query.parameters import (
    AggregateRequest,
    DebugFlags,
    QueryParameters,
    SearchFilter,
)
from search_api.app.platform.config import Settings, settings as default_settings
from search_api.app.platform.exceptions import ParameterValidationError, QueryTooLong

MAX_QUERY_WORDS = 1024

TRUTHY = {"true", "yes", "1", "t", "y"}
FALSY = {"false", "no", "0", "f", "n"}

SINGLE_VALUE_PARAMS = ("q", "similar_to", "order", "start", "count", "debug", "ab_tests")
MULTI_VALUE_PARAMS = ("fields", "suggest")
# 캐시 무효화용 파라미터(값은 사용하지 않음)
IGNORED_PARAMS = ("c",)

FILTER_PREFIXES = {"filter_": "filter", "reject_": "reject"}
AGGREGATE_PREFIXES = ("aggregate_", "facet_")

COMPUTED_FIELDS = (
    "title_with_highlighting",
    "description_with_highlighting",
    "presentation_format",
    "humanized_format",
    "document_type",
    "index",
    "_id",
    "es_score",
)

DEFAULT_RETURN_FIELDS = (
    "description",
    "display_type",
    "document_series",
    "format",
    "link",
    "organisations",
    "public_timestamp",
    "slug",
    "specialist_sectors",
    "title",
    "topics",
    "world_locations",
)

DEFAULT_EXAMPLE_FIELDS = ("link", "title", "format")

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_RANGE_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<bound>before|after)\]$")


def parse_bool_token(value: str) -> Optional[bool]:
    """'yes' → True, '0' → False, 인식 불가 → None"""
    token = value.strip().lower()
    if token in TRUTHY:
        return True
    if token in FALSY:
        return False
    return None


def parse_date(value: str) -> Optional[datetime]:
    """YYYY-MM-DD 또는 ISO 8601 datetime. 인식 불가 → None"""
    try:
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text)
    except ValueError:
        return None


class SearchParameterParser:
    """
    사용 예:
        params = SearchParameterParser(request.query_params, schema).parse()
    """

    def __init__(self, params: Mapping[str, Sequence[str]], schema: IndexSchema,
                 settings: Settings = default_settings):
        self._params = {k: list(v) for k, v in params.items()}
        self._schema = schema
        self._settings = settings
        self._fields = schema.combined_field_definitions()
        self._errors: list[str] = []

    def parse(self) -> QueryParameters:
        self._errors = []
        self._check_unexpected()

        query = self._query()
        result = dict(
            query=query,
            similar_to=self._string("similar_to"),
            order=self._order(),
            start=self._integer("start", 0, self._settings.SEARCH_MAX_START),
            count=self._integer("count", self._settings.SEARCH_DEFAULT_COUNT,
                                self._settings.SEARCH_MAX_COUNT),
            return_fields=self._return_fields(),
            filters=self._filters(),
            aggregates=self._aggregates(),
            debug=self._debug(),
            suggest=self._suggest(),
            ab_tests=self._ab_tests(),
        )

        if self._errors:
            raise ParameterValidationError(self._errors)
        if query and len(query.split()) > MAX_QUERY_WORDS:
            raise QueryTooLong(f"Query must be less than {MAX_QUERY_WORDS} words")
        return QueryParameters(**result)

    # ---- 공통 ----

    def _error(self, message: str) -> None:
        self._errors.append(message)

    def _check_unexpected(self) -> None:
        known = set(SINGLE_VALUE_PARAMS) | set(MULTI_VALUE_PARAMS) | set(IGNORED_PARAMS)
        unexpected = [
            name for name in self._params
            if name not in known
            and not name.startswith(tuple(FILTER_PREFIXES))
            and not name.startswith(AGGREGATE_PREFIXES)
        ]
        if unexpected:
            self._error(f"Unexpected parameters: {', '.join(sorted(unexpected))}")

    def _string(self, name: str) -> Optional[str]:
        values = self._params.get(name) or []
        if len(values) > 1:
            self._error(f'Multiple values supplied for "{name}"')
        if not values:
            return None
        value = values[0].strip()
        return value or None

    def _integer(self, name: str, default: int, maximum: int) -> int:
        raw = self._string(name)
        if raw is None:
            return default
        if not raw.isdigit():
            self._error(f'Invalid value "{raw}" for parameter "{name}" (expected positive integer)')
            return default
        value = int(raw)
        if value > maximum:
            self._error(f'Maximum of {maximum} exceeded for parameter "{name}"')
            return default
        return value

    def _comma_list(self, name: str) -> list[str]:
        tokens = []
        for value in self._params.get(name) or []:
            tokens.extend(t.strip() for t in value.split(",") if t.strip())
        return tokens

    # ---- 개별 파라미터 ----

    def _query(self) -> Optional[str]:
        raw = self._string("q")
        if raw is None:
            return None
        cleaned = _CONTROL_CHARS.sub("", raw).strip()
        return cleaned or None

    def _order(self) -> Optional[tuple[str, str]]:
        raw = self._string("order")
        if raw is None:
            return None
        direction = "desc" if raw.startswith("-") else "asc"
        field = raw.lstrip("-")
        definition = self._fields.get(field)
        if definition is None or not definition.sortable:
            self._error(f'"{field}" is not a valid sort field')
            return None
        return field, direction

    def _return_fields(self) -> list[str]:
        requested = self._comma_list("fields")
        if not requested:
            return [f for f in DEFAULT_RETURN_FIELDS if f in self._fields]
        invalid = [f for f in requested if f not in self._fields and f not in COMPUTED_FIELDS]
        if invalid:
            self._error(f"Some requested fields are not valid return fields: {invalid}")
        return [f for f in dict.fromkeys(requested) if f not in invalid]

    def _debug(self) -> DebugFlags:
        flags = {}
        for token in self._comma_list("debug"):
            if token not in DebugFlags.model_fields:
                self._error(f'Unknown debug option "{token}"')
                continue
            flags[token] = True
        return DebugFlags(**flags)

    def _suggest(self) -> list[str]:
        options = self._comma_list("suggest")
        for option in options:
            if option != "spelling":
                self._error(f'Unknown suggest option "{option}"')
        return [o for o in options if o == "spelling"]

    def _ab_tests(self) -> dict[str, str]:
        tests = {}
        for token in self._comma_list("ab_tests"):
            name, sep, variant = token.partition(":")
            if not sep or not name or not variant:
                self._error(f'Invalid ab_tests value "{token}" (expected name:variant)')
                continue
            tests[name] = variant
        return tests

    # ---- 필터 ----

    def _filter_definition(self, field: str) -> Optional[FieldDefinition]:
        definition = self._fields.get(field)
        if definition is None or not definition.filterable:
            self._error(f'"{field}" is not a valid filter field')
            return None
        return definition

    def _filters(self) -> list[SearchFilter]:
        grouped: dict[tuple[str, str], dict[str, Any]] = {}
        for name, values in self._params.items():
            prefix = next((p for p in FILTER_PREFIXES if name.startswith(p)), None)
            if prefix is None:
                continue
            operation = FILTER_PREFIXES[prefix]
            key = name[len(prefix):]
            m = _RANGE_KEY.match(key)
            field, bound = (m.group("field"), m.group("bound")) if m else (key, None)
            entry = grouped.setdefault((operation, field), {"values": [], "bounds": {}})
            if bound:
                entry["bounds"][bound] = values
            else:
                entry["values"].extend(values)

        filters = []
        for (operation, field), entry in grouped.items():
            definition = self._filter_definition(field)
            if definition is None:
                continue
            built = self._build_filter(operation, definition, entry["values"], entry["bounds"])
            if built is not None:
                filters.append(built)
        return filters

    def _build_filter(self, operation: str, definition: FieldDefinition,
                      values: list[str], bounds: dict[str, list[str]]) -> Optional[SearchFilter]:
        field = definition.name
        base = dict(field_name=field, field_type=definition.type, operation=operation,
                    multivalued=definition.multivalued)

        if definition.type == "date":
            if values:
                self._error(f'Filter on date field "{field}" must use [before] or [after]')
                return None
            parsed = {}
            for bound, raw_values in bounds.items():
                if len(raw_values) != 1:
                    self._error(f'Only one value allowed for "{field}[{bound}]"')
                    continue
                value = parse_date(raw_values[0])
                if value is None:
                    self._error(f'Invalid {bound} date "{raw_values[0]}" for field "{field}"')
                    continue
                parsed[bound] = value
            if not parsed:
                return None
            return SearchFilter(**base, **parsed)

        if bounds:
            self._error(f'Range filters are only supported for date fields, not "{field}"')
            return None

        values = [v for v in (s.strip() for s in values) if v]
        if not values:
            self._error(f'Filter on "{field}" requires a value')
            return None

        if definition.type == "boolean":
            parsed_values = []
            for raw in values:
                value = parse_bool_token(raw)
                if value is None:
                    self._error(f'Invalid boolean value "{raw}" for field "{field}"')
                else:
                    parsed_values.append(value)
            if len(parsed_values) != len(values):
                return None
            return SearchFilter(**base, values=list(dict.fromkeys(parsed_values)))

        return SearchFilter(**base, values=list(dict.fromkeys(values)))

    # ---- 집계 ----

    def _aggregates(self) -> dict[str, AggregateRequest]:
        aggregates = {}
        for name, values in self._params.items():
            prefix = next((p for p in AGGREGATE_PREFIXES if name.startswith(p)), None)
            if prefix is None:
                continue
            field = name[len(prefix):]
            definition = self._fields.get(field)
            if definition is None or not definition.filterable:
                self._error(f'"{field}" is not a valid aggregate field')
                continue
            if len(values) != 1:
                self._error(f'Multiple values supplied for "{name}"')
                continue
            request = self._aggregate_request(field, values[0])
            if request is not None:
                aggregates[field] = request
        return aggregates

    def _aggregate_request(self, field: str, raw: str) -> Optional[AggregateRequest]:
        tokens = [t.strip() for t in raw.split(",")]
        count, options = tokens[0], tokens[1:]
        ok = True
        if not count.isdigit():
            self._error(f'Invalid aggregate count "{count}" for field "{field}"')
            return None
        request: dict[str, Any] = {"field_name": field, "requested": int(count)}
        if request["requested"] > self._settings.AGGREGATE_MAX_OPTIONS:
            self._error(f'Maximum of {self._settings.AGGREGATE_MAX_OPTIONS} aggregate options '
                        f'exceeded for field "{field}"')
            ok = False

        for option in options:
            key, sep, value = option.partition(":")
            if not sep:
                self._error(f'Invalid aggregate option "{option}" for field "{field}"')
                ok = False
            elif key == "examples":
                if not value.isdigit():
                    self._error(f'Invalid examples count "{value}" for field "{field}"')
                    ok = False
                elif int(value) > self._settings.AGGREGATE_MAX_EXAMPLES:
                    self._error(f'Maximum of {self._settings.AGGREGATE_MAX_EXAMPLES} examples '
                                f'exceeded for field "{field}"')
                    ok = False
                else:
                    request["examples"] = int(value)
            elif key == "example_scope":
                if value not in ("global", "query"):
                    self._error(f'Invalid example_scope "{value}" for field "{field}"')
                    ok = False
                else:
                    request["example_scope"] = value
            elif key == "example_fields":
                names = [n for n in value.split(":") if n]
                invalid = [n for n in names if n not in self._fields]
                if invalid:
                    self._error(f'Invalid example fields {invalid} for field "{field}"')
                    ok = False
                request["example_fields"] = names
            elif key == "order":
                if value not in ("count", "value"):
                    self._error(f'Invalid aggregate order "{value}" for field "{field}"')
                    ok = False
                else:
                    request["order"] = value
            else:
                self._error(f'Unknown aggregate option "{key}" for field "{field}"')
                ok = False

        if not ok:
            return None
        if request.get("examples") and not request.get("example_fields"):
            request["example_fields"] = [f for f in DEFAULT_EXAMPLE_FIELDS if f in self._fields]
        return AggregateRequest(**request)
