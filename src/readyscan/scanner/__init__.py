from .fetch import fetch_document
from .llm import LLMAnalyzer
from .models import OPTIONAL_SECTIONS, ScanResult, SectionState
from .orchestrator import Scanner, apply_filters, boundary_findings
from .serialization import finding_from_dict, finding_to_dict, scan_result_to_dict, to_json

__all__ = [
    "LLMAnalyzer",
    "OPTIONAL_SECTIONS",
    "ScanResult",
    "Scanner",
    "SectionState",
    "apply_filters",
    "boundary_findings",
    "fetch_document",
    "finding_from_dict",
    "finding_to_dict",
    "scan_result_to_dict",
    "to_json",
]
