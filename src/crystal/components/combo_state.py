from dataclasses import dataclass


@dataclass(slots=True)
class ComboState:
    """Chain depth and score of the cascade currently resolving.

    Reset at the start of every accepted swap.
    """
    chain_depth: int = 0
    score_accumulated: int = 0

    def reset(self) -> None:
        self.chain_depth = 0
        self.score_accumulated = 0
