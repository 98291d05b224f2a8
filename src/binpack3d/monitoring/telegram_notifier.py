"""Lightweight Telegram notifications for packing runs.

Sends plain-text messages to a Telegram chat via the Bot API for:
- Run start
- Per-bin summaries
- Final results

No retry logic — notifications are non-critical and never raise.
"""

from __future__ import annotations

import os

import httpx


TELEGRAM_API = "https://api.telegram.org/bot{token}/sendMessage"


async def send_telegram(
    message: str,
    chat_id: str | None = None,
    token: str | None = None,
    client: httpx.AsyncClient | None = None,
) -> bool:
    """Send a plain-text message to a Telegram chat.

    Args:
        message: Text to send.
        chat_id: Telegram chat ID. Defaults to the TELEGRAM_CHAT_ID env var.
        token: Bot token. Defaults to the TELEGRAM_BOT_TOKEN env var.
        client: Optional pre-built client (its transport is reused).

    Returns:
        True if the API acknowledged the message, False otherwise
        (including when no token or chat ID is configured).
    """
    token = token or os.environ.get("TELEGRAM_BOT_TOKEN", "")
    chat_id = chat_id or os.environ.get("TELEGRAM_CHAT_ID", "")
    if not token or not chat_id:
        return False

    url = TELEGRAM_API.format(token=token)
    payload = {"chat_id": chat_id, "text": message}

    try:
        if client is not None:
            resp = await client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=10.0) as own_client:
                resp = await own_client.post(url, json=payload)
        return bool(resp.json().get("ok", False))
    except (httpx.HTTPError, ValueError):
        return False


def format_run_start(
    algorithm: str,
    boxes: int,
    bin_dims: tuple[float, float, float],
) -> str:
    """Format a run start message.

    Example:
        >>> print(format_run_start("maxrects", 22, (1500, 1500, 800)))
        Packing run started
        Algorithm: maxrects
        Requests: 22
        Bin: 1500 x 1500 x 800
    """
    return (
        f"Packing run started\n"
        f"Algorithm: {algorithm}\n"
        f"Requests: {boxes}\n"
        f"Bin: {bin_dims[0]} x {bin_dims[1]} x {bin_dims[2]}"
    )


def format_bin_summary(
    bin_id: int,
    boxes_placed: int,
    boxes_rejected: int,
    occupancy: float,
    algorithm: str,
) -> str:
    """Format a per-bin summary message.

    Example:
        >>> print(format_bin_summary(0, 20, 2, 0.734, "guillotine"))
        Bin #0 (guillotine)
        Placed: 20, rejected: 2
        Occupancy: 73.4%
    """
    return (
        f"Bin #{bin_id} ({algorithm})\n"
        f"Placed: {boxes_placed}, rejected: {boxes_rejected}\n"
        f"Occupancy: {occupancy:.1%}"
    )


def format_final_summary(
    total_bins: int,
    total_boxes: int,
    avg_occupancy: float,
    runtime_seconds: float,
) -> str:
    """Format the final run summary.

    Example:
        >>> print(format_final_summary(1, 20, 0.5, 0.25))
        Packing run complete
        Bins: 1
        Boxes: 20
        Avg occupancy: 50.0%
        Runtime: 0.250 s
    """
    return (
        f"Packing run complete\n"
        f"Bins: {total_bins}\n"
        f"Boxes: {total_boxes}\n"
        f"Avg occupancy: {avg_occupancy:.1%}\n"
        f"Runtime: {runtime_seconds:.3f} s"
    )
