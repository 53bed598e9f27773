"""varify package root."""

from varify.eligibility import initializer_allowed, is_eligible
from varify.exceptions import MalformedEditSequenceError, VarifyError
from varify.inference import infer_type
from varify.locator import Declaration, locate_declarations
from varify.policy import DEFAULT_POLICY, PolicyConfiguration
from varify.processor import (
    MIN_SUPPORTED_VERSION,
    ProcessingResult,
    is_version_supported,
    plan_declarations,
    plan_file,
    process_file,
    process_files,
)
from varify.rewrite import AppliedEdit, EditOperation, apply_edits, rewrite

__all__ = [
    "__version__",
    "AppliedEdit",
    "DEFAULT_POLICY",
    "Declaration",
    "EditOperation",
    "MIN_SUPPORTED_VERSION",
    "MalformedEditSequenceError",
    "PolicyConfiguration",
    "ProcessingResult",
    "VarifyError",
    "apply_edits",
    "infer_type",
    "initializer_allowed",
    "is_eligible",
    "is_version_supported",
    "locate_declarations",
    "plan_declarations",
    "plan_file",
    "process_file",
    "process_files",
    "rewrite",
]

__version__ = "0.1.0"
