STAGE_BUILD = "unified build"
STAGE_DECOMPOSITION = "decomposition"
STAGE_EXTRACTION = "extraction"
STAGE_GROUPING = "grouping"


class BuildError(RuntimeError):
    def __init__(self, message: str, stage: str = STAGE_BUILD) -> None:
        super().__init__(f"{stage} failed: {message}")
        self.message = message
        self.stage = stage


class CapacityExceeded(BuildError):
    def __init__(self, num_surfels: int, limit: int) -> None:
        super().__init__(
            f"{num_surfels} surfels exceed the limit of {limit} for one streaming tree")
        self.num_surfels = num_surfels
        self.limit = limit


class EmptyAggregationInput(BuildError):
    def __init__(self) -> None:
        super().__init__("cannot compute a LOD surfel from zero surfels")


class DecompositionError(BuildError):
    def __init__(self, message: str) -> None:
        super().__init__(message, stage=STAGE_DECOMPOSITION)
