"""
도메인 모델 정의.

- FieldDefinition / DocumentTypeSchema / IndexSchema: 인덱스 스키마(문서 타입별 필드 집합)
- PromotedResult: 색인 시점에 특정 링크를 검색어에 묶어 두는 레거시 프로모션

Pydantic v2 기반 모델이라 검증/직렬화가 용이합니다.
"""

from __future__ import annotations

import json
from typing import Any, Literal
from pydantic import BaseModel, Field, model_validator

from search_api.app.platform.exceptions import InvalidInput


JSONDict = dict[str, Any]

FieldType = Literal["text", "identifier", "date", "boolean", "integer", "float"]

SORTABLE_TYPES = ("date", "integer", "float")


class FieldDefinition(BaseModel):
    """스키마에 선언된 필드 1개."""
    name: str
    type: FieldType = Field("identifier", description="필드 타입")
    multivalued: bool = Field(False, description="다중 값 필드 여부(항상 list로 표현)")
    filterable: bool | None = Field(
        None, description="필터/집계 허용 여부(미지정이면 text가 아닌 필드만 허용)"
    )

    @model_validator(mode="after")
    def _default_filterable(self) -> "FieldDefinition":
        if self.filterable is None:
            self.filterable = self.type != "text"
        return self

    @property
    def sortable(self) -> bool:
        return self.type in SORTABLE_TYPES


class DocumentTypeSchema(BaseModel):
    """문서 타입(edition, best_bet 등) 하나의 필드 집합."""
    name: str
    fields: dict[str, FieldDefinition] = Field(default_factory=dict)


class IndexSchema(BaseModel):
    """
    인덱스 스키마.
    identity_field는 문서를 식별하는 필드로, 수정할 수 없다.
    """
    identity_field: str = "link"
    default_document_type: str = "edition"
    document_types: dict[str, DocumentTypeSchema] = Field(default_factory=dict)

    def field_definitions(self, doc_type: str | None = None) -> dict[str, FieldDefinition]:
        name = doc_type or self.default_document_type
        try:
            return self.document_types[name].fields
        except KeyError:
            raise InvalidInput(f"Unknown document type '{name}'")

    def combined_field_definitions(self) -> dict[str, FieldDefinition]:
        """모든 문서 타입의 필드를 합친 것(검색 파라미터 검증용). 기본 타입이 우선."""
        combined: dict[str, FieldDefinition] = {}
        ordered = [self.default_document_type] + [
            n for n in self.document_types if n != self.default_document_type
        ]
        for name in ordered:
            for field_name, definition in self.document_types[name].fields.items():
                combined.setdefault(field_name, definition)
        return combined

    @classmethod
    def from_dict(cls, raw: JSONDict) -> "IndexSchema":
        types = {}
        for type_name, type_def in raw.get("document_types", {}).items():
            fields = {
                field_name: FieldDefinition(name=field_name, **(options or {}))
                for field_name, options in type_def.get("fields", {}).items()
            }
            types[type_name] = DocumentTypeSchema(name=type_name, fields=fields)
        return cls(
            identity_field=raw.get("identity_field", "link"),
            default_document_type=raw.get("default_document_type", "edition"),
            document_types=types,
        )


def load_index_schema(path: str) -> IndexSchema:
    """JSON 스키마 파일을 읽어 IndexSchema로 변환한다."""
    with open(path, "r", encoding="utf-8") as f:
        return IndexSchema.from_dict(json.load(f))


class PromotedResult(BaseModel):
    """link 문서를 terms 검색어에 프로모션한다(색인 시 promoted_for 필드로 기록)."""
    link: str
    terms: list[str] = Field(default_factory=list)

    @property
    def promoted_for(self) -> str:
        return " ".join(self.terms)


def load_promoted_results(path: str) -> list[PromotedResult]:
    with open(path, "r", encoding="utf-8") as f:
        return [PromotedResult.model_validate(item) for item in json.load(f)]

