"""Errors raised by the custody service layer."""


class CustodyError(Exception):
    """Base class for custody workflow errors."""


class ItemNotFound(CustodyError):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Inventory item {item_id} not found.")


class SlipNotFound(CustodyError):
    def __init__(self, slip_id):
        self.slip_id = slip_id
        super().__init__(f"Custodian slip {slip_id} not found.")


class AlreadyAssigned(CustodyError):
    def __init__(self, property_number, custodian=None):
        self.property_number = property_number
        self.custodian = custodian
        holder = f" to {custodian}" if custodian else ""
        super().__init__(
            f"Inventory item {property_number} is already assigned{holder}."
        )


class NotServiceable(CustodyError):
    def __init__(self, property_number, condition):
        self.property_number = property_number
        self.condition = condition
        super().__init__(
            f"Inventory item {property_number} is not serviceable "
            f"({condition})."
        )


class PropertyCardMissing(CustodyError):
    def __init__(self, property_number):
        self.property_number = property_number
        super().__init__(
            f"Inventory item {property_number} has no property card to "
            f"post the issuance to."
        )


class ExhaustedRetries(CustodyError):
    """No free sequence number was found within the attempt bound."""


class PartialWriteFailure(CustodyError):
    """A step of item issuance failed after earlier writes succeeded.

    The writes of the affected slips have already been rolled back when
    this is raised. ``original`` is the exception the step raised.
    """

    def __init__(self, step, property_number, original):
        self.step = step
        self.property_number = property_number
        self.original = original
        super().__init__(
            f"Issuing {property_number} failed at '{step}': {original}"
        )


class StoreUnavailable(CustodyError):
    """The underlying store call could not complete."""


class StoreConflict(StoreUnavailable):
    """The store rejected a write that violates a unique constraint."""


class ImmutableSlip(CustodyError):
    def __init__(self, slip_number, status):
        self.slip_number = slip_number
        self.status = status
        super().__init__(
            f"Custodian slip {slip_number} is {status} and cannot be "
            f"deleted without an explicit override."
        )


class TransferNotFound(CustodyError):
    def __init__(self, transfer_id):
        self.transfer_id = transfer_id
        super().__init__(f"Transfer {transfer_id} not found.")


class NotAssigned(CustodyError):
    def __init__(self, property_number):
        self.property_number = property_number
        super().__init__(
            f"Inventory item {property_number} is not assigned to anyone and "
            f"cannot be transferred."
        )


class InvalidTransfer(CustodyError):
    """A transfer request that cannot be carried out as asked."""
