"""
JSON reporter: outputs pinning results as structured JSON for programmatic use.
"""

import json
import logging

from gha_pin.pinning.pinner import PinResult

logger = logging.getLogger(__name__)


def _result_dict(result: PinResult) -> dict:
    return {
        "file_path": result.file_path,
        "updated": len(result.updates),
        "cancelled": result.cancelled,
        "updates": [
            {
                "line_number": u.line_index + 1,
                "repository": u.resolved.repository,
                "path": u.reference.full_path,
                "old_ref": u.reference.current_ref,
                "old_version": u.old_version,
                "new_version": u.resolved.version,
                "new_commit": u.resolved.commit_sha,
                "link": u.link,
            }
            for u in result.updates
        ],
        "skipped": [
            {
                "line_number": r.line_index + 1,
                "repository": r.repository,
                "ref": r.current_ref,
            }
            for r in result.skipped
        ],
        "errors": [
            {
                "repository": e.repository,
                "kind": e.kind,
                "status": e.status,
                "reason": e.reason,
            }
            for e in result.errors
        ],
    }


def report_json(results: list[PinResult]) -> str:
    """
    Format pinning results as a JSON string.

    Args:
        results: One PinResult per workflow file.

    Returns:
        A JSON string with totals and per-file details.
    """
    data = {
        "updated": sum(len(r.updates) for r in results),
        "errors": sum(len(r.errors) for r in results),
        "files": [_result_dict(r) for r in results],
    }
    output = json.dumps(data, indent=2)
    logger.info("JSON report: %d file(s), %d bytes", len(results), len(output))
    return output
