"""
문서 모델.

스키마에 선언된 필드만 담는 매핑. 다중 값 필드는 항상 list, 단일 값 필드는 항상 스칼라.
- Document.from_wire: 입력(JSON/엔진 응답) → Document
- Document.to_wire: 설정된 필드만 선언된 형태로 출력
- Document.export_for_index: to_wire + _type (bulk 적재용)
- ResultPromoter: 색인 시점 promoted_for 필드 관리
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from search_api.app.domain.models import FieldDefinition, IndexSchema, PromotedResult
from search_api.app.platform.exceptions import ImmutableFieldError, UnknownFieldError

log = logging.getLogger(__name__)

# 엔진 저장 시 문서 타입을 담는 키
METADATA_KEYS = ("_type", "document_type")


def _key_name(key: Any) -> str:
    # Enum 멤버 등 value 속성이 있는 키도 허용
    value = getattr(key, "value", key)
    return str(value)


def _coerce(definition: FieldDefinition, value: Any) -> Any:
    """None은 미설정으로 본다. 반환값이 None이면 필드를 비운다."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        values = [v for v in value if v is not None]
    else:
        values = [value]
    if definition.multivalued:
        return values or None
    # 엔진 fields 응답은 단일 값도 list로 준다
    return values[0] if values else None


class Document:
    """스키마 검증을 거친 문서 1건."""

    def __init__(self, schema: IndexSchema, doc_type: Optional[str] = None,
                 fields: Optional[Mapping[str, Any]] = None):
        self._schema = schema
        self._doc_type = doc_type or schema.default_document_type
        self._definitions = schema.field_definitions(self._doc_type)
        self._fields: dict[str, Any] = {}
        for name, value in (fields or {}).items():
            self._assign(name, value)

    @classmethod
    def from_wire(cls, data: Mapping[Any, Any], schema: IndexSchema,
                  doc_type: Optional[str] = None) -> "Document":
        """
        입력 매핑에서 스키마에 선언된 필드만 골라 문서를 만든다.
        Args:
            data: 문자열 키 또는 Enum 등 심볼 형태 키의 매핑
            schema: 인덱스 스키마
            doc_type: 문서 타입(없으면 data의 _type, 그것도 없으면 기본 타입)
        Returns:
            Document
        """
        normalized = {_key_name(k): v for k, v in data.items()}
        doc_type = (doc_type or normalized.get("_type") or normalized.get("document_type")
                    or schema.default_document_type)
        doc = cls(schema, doc_type)
        dropped = []
        for name, value in normalized.items():
            if name in doc._definitions:
                doc._assign(name, value)
            elif name not in METADATA_KEYS:
                dropped.append(name)
        if dropped:
            log.debug("document.from_wire: dropped unknown fields=%s", dropped)
        return doc

    def _assign(self, name: str, value: Any) -> None:
        definition = self._definitions[name]
        coerced = _coerce(definition, value)
        if coerced is None:
            self._fields.pop(name, None)
        else:
            self._fields[name] = coerced

    @property
    def doc_type(self) -> str:
        return self._doc_type

    @property
    def link(self) -> Optional[str]:
        return self._fields.get(self._schema.identity_field)

    def has_field(self, name: str) -> bool:
        return name in self._definitions

    def get(self, name: str, default: Any = None) -> Any:
        return self._fields.get(name, default)

    def set(self, name: str, value: Any) -> None:
        """
        단일 필드 덮어쓰기.
        Raises:
            UnknownFieldError: 스키마에 없는 필드
            ImmutableFieldError: 식별 필드(link)
        """
        if name not in self._definitions:
            raise UnknownFieldError(name)
        if name == self._schema.identity_field:
            raise ImmutableFieldError(name)
        self._assign(name, value)

    def update(self, values: Mapping[str, Any]) -> None:
        """여러 필드를 한꺼번에 수정한다. 검증을 모두 통과해야 반영된다."""
        for name in values:
            if name not in self._definitions:
                raise UnknownFieldError(name)
            if name == self._schema.identity_field:
                raise ImmutableFieldError(name)
        for name, value in values.items():
            self._assign(name, value)

    def to_wire(self) -> dict[str, Any]:
        return {
            name: list(value) if isinstance(value, list) else value
            for name, value in self._fields.items()
        }

    def export_for_index(self) -> dict[str, Any]:
        exported = self.to_wire()
        exported["_type"] = self._doc_type
        return exported

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._doc_type == other._doc_type and self._fields == other._fields

    def __repr__(self) -> str:
        return f"Document(type={self._doc_type!r}, link={self.link!r})"


class ResultPromoter:
    """
    프로모션 대상 링크 문서에 promoted_for 필드를 기록한다.
    대상이 아닌 문서에 남아 있는 promoted_for는 제거한다.
    """

    def __init__(self, promoted_results: Iterable[PromotedResult]):
        self._by_link = {p.link: p for p in promoted_results}

    def with_promotion(self, doc: Mapping[str, Any]) -> dict[str, Any]:
        promoted = dict(doc)
        match = self._by_link.get(promoted.get("link"))
        if match is not None:
            promoted["promoted_for"] = match.promoted_for
        else:
            promoted.pop("promoted_for", None)
        return promoted
