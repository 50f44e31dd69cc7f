"""SKU domain exceptions."""

from epg_inventory.services.exceptions import ConflictError, NotFoundError, ValidationError


class UnknownPrefixError(ValidationError):
    """Category or brand has no registered short code.

    Missing master data; an operator has to add the mapping before retrying.
    """

    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"No SKU prefix registered for {kind} {name!r}")


class MalformedSKUError(ValidationError):
    """Candidate SKU does not match the canonical grammar."""

    def __init__(self, sku: str, reason: str):
        self.sku = sku
        self.reason = reason
        super().__init__(f"Malformed SKU {sku!r}: {reason}")


class DuplicateSKUError(ConflictError):
    """Manually supplied SKU is already assigned to another instance."""

    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"SKU {sku!r} already exists")


class SKUCollisionError(ConflictError):
    """Freshly generated SKU is already held by an instance.

    Usually means the sequence table was reset or restored from a stale backup.
    """

    def __init__(self, sku: str):
        self.sku = sku
        super().__init__(f"Generated SKU {sku!r} collides with an existing instance")


class AutoGenerationDisabledError(ConflictError):
    """No manual SKU supplied while auto-generation is off."""

    pass


class SequenceExhaustedError(ConflictError):
    """Sequence outgrew its padded width and widening is disabled."""

    def __init__(self, category_prefix: str, brand_prefix: str, sequence: int, capacity: int):
        self.category_prefix = category_prefix
        self.brand_prefix = brand_prefix
        self.sequence = sequence
        self.capacity = capacity
        super().__init__(
            f"Sequence for {category_prefix}-{brand_prefix} exhausted: {sequence} exceeds maximum {capacity}"
        )


class SequenceNotFoundError(NotFoundError):
    """No counter exists for the prefix pair."""

    def __init__(self, category_prefix: str, brand_prefix: str):
        self.category_prefix = category_prefix
        self.brand_prefix = brand_prefix
        super().__init__(f"Sequence record not found for {category_prefix}-{brand_prefix}")
