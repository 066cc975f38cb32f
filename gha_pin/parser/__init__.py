from .workflow_parser import (
    ActionReference,
    StructuralValidationError,
    extract_references,
    find_workflow_files,
    parse_workflow_file,
    validate_workflow_syntax,
)

__all__ = [
    "ActionReference",
    "StructuralValidationError",
    "extract_references",
    "find_workflow_files",
    "parse_workflow_file",
    "validate_workflow_syntax",
]
