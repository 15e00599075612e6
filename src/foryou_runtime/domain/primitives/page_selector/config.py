from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PageSelectorConfig:
    default_page_size: int = 14
    default_exploration_ratio: float = 0.1
    max_exploration_ratio: float = 0.5
    # The top ranked item keeps the first slot of every page
    anchor_first_slot: bool = True
