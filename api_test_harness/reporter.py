"""Reporting of API test results."""

import logging
import sys
from typing import Any, NoReturn, TextIO

from api_test_harness.models.result import TestResult
from api_test_harness.session import ApiTestSession

log = logging.getLogger(__name__)

STATUS_SYMBOLS = {
    True: "✅",
    False: "❌",
}

RULE = "-" * 80


def format_duration(duration: float | None) -> str:
    """Format elapsed seconds as milliseconds, or '-' when never measured."""
    if duration is None:
        return "-"
    return f"{duration * 1000:.3f}ms"


def format_row(result: TestResult) -> str:
    """Format one table row, with the error appended if there is one."""
    status = "pass" if result.passed else "fail"
    row = (
        f"| {result.sequence:<4} | {STATUS_SYMBOLS[result.passed]} {status:<6}"
        f" | {format_duration(result.duration):<14} | {result.description}"
    )
    if result.error is not None:
        row += f" [ Error: {result.error} ]"
    return row


def render_report(session: ApiTestSession) -> str:
    """Render the results table followed by the totals."""
    lines = [
        "",
        "API Test Result:",
        "",
        RULE,
        f"| {'No':<4} | {'Status':<8} | {'Time':<14} | Description",
        RULE,
    ]
    lines.extend(format_row(session.results[seq]) for seq in sorted(session.results))
    lines.append(RULE)
    lines.extend(
        [
            "",
            f"{'Total API test cases':<32} : {session.total}",
            f"{'Passed API test cases':<32} : {session.passed}/{session.total}",
            f"{'Failed API test cases':<32} : {session.failed}/{session.total}",
            "",
        ]
    )
    return "\n".join(lines)


def log_results_summary(log: logging.Logger, session: ApiTestSession) -> None:
    """Log one line per result and the totals."""
    log.info("=" * 80)
    log.info("API Test Results Summary:")
    log.info("=" * 80)

    for result in session.results.values():
        log.info(
            "%s #%d %s (%s)",
            STATUS_SYMBOLS[result.passed],
            result.sequence,
            result.description,
            format_duration(result.duration),
        )
        if result.error is not None:
            log.info("  Error (%s): %s", result.error_kind, result.error)

    log.info(
        "Total: %d, passed: %d, failed: %d",
        session.total,
        session.passed,
        session.failed,
    )


def format_output(session: ApiTestSession) -> dict[str, Any]:
    """Format session results for JSON output."""
    results = [
        {
            "sequence": result.sequence,
            "status": "passed" if result.passed else "failed",
            "duration": result.duration,
            "description": result.description,
            "error_kind": result.error_kind,
            "error": None if result.error is None else str(result.error),
        }
        for result in session.results.values()
    ]
    return {
        "total": session.total,
        "passed": session.passed,
        "failed": session.failed,
        "results": results,
    }


def exit_code(session: ApiTestSession) -> int:
    """Process exit code for the session: 1 if any test failed, else 0."""
    return 1 if session.failed > 0 else 0


def exit_process(code: int) -> NoReturn:
    """Terminate the process with the given exit code."""
    sys.exit(code)


async def report(
    session: ApiTestSession,
    *,
    exit_on_finish: bool = False,
    stream: TextIO | None = None,
) -> int:
    """Print the results, close the session, and optionally exit.

    The session is closed even when printing fails.

    Args:
        session: Session holding the results to report
        exit_on_finish: Terminate the process with the exit code when done
        stream: Where the table is written (default: stdout)

    Returns:
        Exit code reflecting the results, when not exiting

    """
    try:
        print(render_report(session), file=stream)
        log_results_summary(log, session)
    finally:
        await session.close()

    code = exit_code(session)
    if exit_on_finish:
        exit_process(code)
    return code
