"""Slip and transfer status machines and transition validation."""

from django.core.exceptions import ValidationError

from ..models import CustodianSlip, Transfer


def validate_slip_transition(slip: CustodianSlip, new_status: str) -> None:
    """Validate and raise if the status transition is not allowed.

    Raises ValidationError if the transition is invalid.
    """
    if new_status == slip.slip_status:
        return

    if new_status not in dict(CustodianSlip.STATUS_CHOICES):
        raise ValidationError(f"'{new_status}' is not a valid slip status.")

    if not slip.can_transition_to(new_status):
        allowed = CustodianSlip.VALID_TRANSITIONS.get(slip.slip_status, [])
        raise ValidationError(
            f"Cannot transition slip {slip.slip_number} from "
            f"'{slip.get_slip_status_display()}' to '{new_status}'. "
            f"Allowed transitions: {', '.join(allowed) or 'none'}."
        )

    # An empty slip has nothing to hand over
    if new_status in ("issued", "completed") and not slip.items.exists():
        raise ValidationError(
            f"Slip {slip.slip_number} has no items and cannot be "
            f"marked as '{new_status}'."
        )


def transition_slip(slip: CustodianSlip, new_status: str) -> CustodianSlip:
    """Validate and perform a status transition.

    Returns the updated (saved) slip.
    Raises ValidationError if the transition is not allowed.
    """
    validate_slip_transition(slip, new_status)
    slip.slip_status = new_status
    slip.save(update_fields=["slip_status", "updated_at"])
    return slip


def validate_transfer_transition(transfer: Transfer, new_status: str) -> None:
    """Validate and raise if the transfer status transition is not allowed."""
    if new_status not in dict(Transfer.STATUS_CHOICES):
        raise ValidationError(
            f"'{new_status}' is not a valid transfer status."
        )

    if not transfer.can_transition_to(new_status):
        allowed = Transfer.VALID_TRANSITIONS.get(transfer.status, [])
        raise ValidationError(
            f"Cannot transition transfer {transfer.transfer_number} from "
            f"'{transfer.get_status_display()}' to '{new_status}'. "
            f"Allowed transitions: {', '.join(allowed) or 'none'}."
        )
