from datetime import datetime, timezone
from typing import Dict, Iterable, List, Sequence

from tabulate import tabulate

from dockclean.domain.image import Image
from dockclean.domain.outcome import CONTAINER, IMAGE, OutcomeStatus, RunResult

STATUS_LABELS = {
    OutcomeStatus.SUCCEEDED: "Removed",
    OutcomeStatus.FAILED: "Failed",
    OutcomeStatus.SKIPPED: "Skipped",
}


def format_size(num_bytes: int) -> str:
    """Human readable size with 1024-based units, e.g. "1.5 MB"."""
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"
    value = float(num_bytes)
    for suffix in "KMGTPE":
        value /= unit
        if value < unit or suffix == "E":
            return f"{value:.1f} {suffix}B"


def format_image_id(image_id: str, max_len: int = 32) -> str:
    if len(image_id) <= max_len:
        return image_id
    return image_id[: max_len - 3] + "..."


def format_labels(labels: Dict[str, str]) -> str:
    if not labels:
        return "No Labels Found"
    return ", ".join(key if not value else f"{key}:{value}" for key, value in labels.items())


def format_created(created: int) -> str:
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat().replace("+00:00", "Z")


def render_dry_run(images: Sequence[Image]) -> str:
    if not images:
        return "No unused images found."
    lines = ["The following images would be removed:"]
    lines.extend(
        f"ID: {img.id}, Created: {format_created(img.created)}, Size: {format_size(img.size)}"
        for img in images
    )
    return "\n".join(lines)


def render_outcome_table(images: Iterable[Image], result: RunResult) -> str:
    """Table of every attempted image with its final status."""
    by_id = {img.id: img for img in images}
    rows: List[list] = []
    for outcome in result.outcomes:
        if outcome.kind != IMAGE:
            continue
        img = by_id.get(outcome.resource_id)
        rows.append([
            format_image_id(outcome.resource_id),
            format_size(img.size) if img else "-",
            format_created(img.created) if img else "-",
            STATUS_LABELS[outcome.status],
            format_labels(img.labels) if img else "-",
        ])
    headers = ["ID", "Size", "Created (RFC3339)", "Status", "Labels"]
    return tabulate(rows, headers=headers, tablefmt="grid")


def render_summary(result: RunResult) -> str:
    summary = (
        f"Summary: Removed {result.succeeded(IMAGE)} images, "
        f"{result.failed(IMAGE)} failed (Total space freed: {format_size(result.reclaimed_bytes)})"
    )
    containers = result.succeeded(CONTAINER) + result.failed(CONTAINER) + result.skipped(CONTAINER)
    if containers:
        summary += (
            f"; containers removed {result.succeeded(CONTAINER)}, "
            f"failed {result.failed(CONTAINER)}, skipped {result.skipped(CONTAINER)}"
        )
    return summary
