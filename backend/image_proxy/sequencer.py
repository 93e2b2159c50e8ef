"""
Auth Strategy Trial Sequencer

Tries each authentication strategy in declared order and stops at the
first response that is really an image. Failed attempts (rejections and
network errors alike) are recorded and never abort the sequence.
"""

import logging
from typing import Sequence

from .classifier import classify, describe_rejection
from .errors import UpstreamTransportError
from .fetcher import UpstreamFetcher
from .models import AttemptRecord, UpstreamOutcome
from .strategies import AuthStrategy, PROXY_STRATEGIES

logger = logging.getLogger(__name__)


async def try_strategies(
    fetcher: UpstreamFetcher,
    remote_url: str,
    token: str,
    strategies: Sequence[AuthStrategy] = PROXY_STRATEGIES,
) -> UpstreamOutcome:
    """
    Run the strategies against the upstream until one is accepted.

    Returns:
        The accepted outcome, or a non-acceptable outcome carrying the last
        failure reason and the last content-type seen.
    """
    outcome = UpstreamOutcome()

    for strategy in strategies:
        target_url, headers = strategy.prepare(remote_url, token)
        logger.debug(f"[AuthSequencer] Trying '{strategy.name}' for {remote_url[:80]}")

        try:
            response = await fetcher.fetch(target_url, headers)
        except UpstreamTransportError as e:
            logger.warning(f"[AuthSequencer] '{strategy.name}' network error for {e.url[:80]}: {e.message}")
            outcome.attempts.append(AttemptRecord(strategy=strategy.name, error=e.message))
            outcome.last_error = e.message
            continue

        verdict = classify(response.status_code, response.content_type)
        record = AttemptRecord(
            strategy=strategy.name,
            status_code=response.status_code,
            content_type=response.content_type,
            verdict=verdict,
        )
        outcome.attempts.append(record)
        outcome.status_code = response.status_code
        outcome.content_type = response.content_type

        if record.accepted:
            outcome.body = response.body
            outcome.is_acceptable = True
            outcome.strategy = strategy.name
            outcome.last_error = None
            logger.info(f"[AuthSequencer] '{strategy.name}' accepted for {remote_url[:80]}")
            return outcome

        outcome.last_error = describe_rejection(
            verdict, response.status_code, response.content_type
        )
        logger.warning(f"[AuthSequencer] '{strategy.name}' rejected: {outcome.last_error}")

    if not outcome.attempts:
        outcome.last_error = "No authentication strategies available"

    logger.warning(
        f"[AuthSequencer] All {len(outcome.attempts)} strategies failed for {remote_url[:80]}"
    )
    return outcome
