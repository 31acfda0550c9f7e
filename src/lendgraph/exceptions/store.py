from lendgraph.exceptions.base import LendgraphError


class EntityStoreError(LendgraphError):
    """
    Raised when the entity store fails to load or save an entity.

    The underlying driver exception is available as `__cause__`.
    """

    def __init__(self, operation: str, entity_type: type, entity_id: str | None = None) -> None:
        self.operation = operation
        self.entity_type = entity_type
        self.entity_id = entity_id
        target = entity_type.__name__ if entity_id is None else f"{entity_type.__name__}({entity_id})"
        super().__init__(message=f"Entity store {operation} failed for {target}")
