"""Maps rotation results to the trigger API response shape."""

from .pipeline import PipelineResult
from .reconciler import RolloverReport


def build_staging_response(result: PipelineResult) -> dict:
    """
    Response body for a Staging Selector run.

    Returns:
        {"message", "link", "heardle_day", "start_time", "steps"} on success,
        {"error", "step", "steps"} on failure
    """
    if not result.success:
        return {
            "error": result.error.message,
            "step": result.failed_step,
            "steps": result.step_summaries(),
        }

    ctx = result.context
    return {
        "message": f"Successfully uploaded new daily song! {ctx['link']}",
        "link": ctx["link"],
        "link_source": ctx["link_source"],
        "heardle_day": ctx["heardle_day"],
        "start_time": ctx["start_time"],
        "steps": result.step_summaries(),
    }


def build_rollover_response(report: RolloverReport) -> dict:
    """Response body for a Rollover Reconciler run."""
    result = report.result
    if not result.success:
        return {
            "error": result.error.message,
            "step": result.failed_step,
            "steps": result.step_summaries(),
        }

    body = {
        "message": "Successfully reset users and set new daily song!",
        "heardle_day": result.context["heardle_day"],
        "streaks_reset": result.context["streaks_reset"],
        "guesses_deleted": result.context["guesses_deleted"],
        "steps": result.step_summaries(),
    }
    if report.partial:
        body["message"] = "New daily song set, but some users could not be reconciled"
        body["failed_users"] = [outcome.model_dump() for outcome in report.failures]
    return body
