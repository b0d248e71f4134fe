from __future__ import annotations

from typing import Any

from search_api.app.domain.document import Document
from search_api.app.domain.models import IndexSchema
from search_api.app.domain.presenters import formats, highlighting
from search_api.app.domain.presenters.entity_expander import EntityExpander
from search_api.app.domain.query.parameters import QueryParameters
from search_api.app.domain.utils import strip_alias_from_index_name

JSONDict = dict[str, Any]


class ResultPresenter:
    """
    엔진 hit 1건 → 표시용 결과.
    - 요청한 반환 필드만, 스키마 형태(단일/다중)로 정규화
    - _id, index(별칭 이름), es_score, document_type
    - 레지스트리 확장, 하이라이트, 표시 포맷
    """

    def __init__(self, raw_result: JSONDict, expander: EntityExpander,
                 schema: IndexSchema, params: QueryParameters):
        self._raw = raw_result
        self._expander = expander
        self._schema = schema
        self._params = params

    def _document_type(self, source: JSONDict) -> str:
        doc_type = source.get("document_type") or self._raw.get("_type")
        if isinstance(doc_type, list):
            # fields 응답은 값을 list로 준다
            doc_type = doc_type[0] if doc_type else None
        if doc_type in self._schema.document_types:
            return doc_type
        return self._schema.default_document_type

    def present(self) -> JSONDict:
        source = self._raw.get("_source") or self._raw.get("fields") or {}
        doc_type = self._document_type(source)
        wire = Document.from_wire(source, self._schema, doc_type).to_wire()

        result: JSONDict = {
            field: wire[field] for field in self._params.return_fields if field in wire
        }
        result = self._expander.new_result(result)

        if self._params.field_requested("title_with_highlighting"):
            result["title_with_highlighting"] = highlighting.highlighted_title(self._raw)
        if self._params.field_requested("description_with_highlighting"):
            result["description_with_highlighting"] = highlighting.highlighted_description(self._raw)

        result["presentation_format"] = formats.presentation_format(wire.get("format"))
        result["humanized_format"] = formats.humanized_format(wire.get("format"))
        result["_id"] = self._raw.get("_id")
        result["index"] = strip_alias_from_index_name(self._raw.get("_index", ""))
        result["es_score"] = self._raw.get("_score")
        result["document_type"] = doc_type
        return result
