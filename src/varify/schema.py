from __future__ import annotations

from typing import List, Optional, Tuple

from pydantic import BaseModel

from varify.policy import PolicyConfiguration


class PolicyDTO(BaseModel):
    allow_primitive_types: Optional[bool] = None
    allow_loop_variables: Optional[bool] = None
    allow_diamond_operator: Optional[bool] = None
    allow_type_mismatch: Optional[bool] = None
    refactor_anonymous_classes: Optional[bool] = None
    refactor_lambda_expressions: Optional[bool] = None

    def apply_to(self, base: PolicyConfiguration) -> PolicyConfiguration:
        return base.with_overrides(self.model_dump(exclude_none=True))


class ConvertRequest(BaseModel):
    uri: str
    java_version: Optional[str] = None
    policy: Optional[PolicyDTO] = None


class TextEditDTO(BaseModel):
    path: str
    start: Tuple[int, int]
    end: Tuple[int, int]
    replacement: str


class DeclarationDTO(BaseModel):
    variable_name: str
    declared_type: str
    line: int
    character: int


class ConvertResponse(BaseModel):
    path: str = ""
    java_version: str = ""
    modified: bool = False
    gated: bool = False
    edits: List[TextEditDTO] = []
    declarations: List[DeclarationDTO] = []
    errors: List[str] = []
