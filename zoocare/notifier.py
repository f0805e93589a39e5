"""
Staff alerts. Delivery channels (push, email) are external; alerts are logged.
"""

from loguru import logger

from zoocare.models import Animal, BehaviorLog


async def alert_needs_attention(animal: Animal, log: BehaviorLog) -> None:
    logger.warning(
        f"Animal {animal.id} ({animal.name}) flagged for attention: "
        f"eating={log.eating}, movement={log.movement}, mood={log.mood}, "
        f"recorded by {log.recorded_by}"
    )
