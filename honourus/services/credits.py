"""
Credit award rules.

Credits reach a user's counter in two ways:
- completing a task (this module decides whether a completion pays out)
- receiving a recognition (always pays out)
"""

from typing import Optional

COMPLETED = "completed"


def should_award_task_credits(
    previous_status: Optional[str],
    new_status: Optional[str],
    requires_proof: bool,
    proof_uploaded: bool,
    award_without_proof: bool = False,
) -> bool:
    """
    Decide whether a task update awards the task's credits.

    Only a transition into ``completed`` can award. Proof requirements are
    judged against the task as stored before the update. A task that does
    not require proof only awards when ``award_without_proof`` is enabled
    (AWARD_CREDITS_WITHOUT_PROOF).

    Args:
        previous_status: Status stored before the update
        new_status: Status in the update payload (None if not changing)
        requires_proof: Stored requiresProof flag
        proof_uploaded: Stored proofUploaded flag
        award_without_proof: Pay out completions of proof-free tasks

    Returns:
        True if the assignee should be credited
    """
    if new_status != COMPLETED or previous_status == COMPLETED:
        return False

    if requires_proof:
        return bool(proof_uploaded)

    return award_without_proof
