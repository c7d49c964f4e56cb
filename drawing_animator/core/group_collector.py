"""
Group Collector

Partitions resolved elements into animation groups.

Explicit groups come from the author's group memberships: the first
(primary) group id of an element decides its animation group, and members
keep the order in which they were first met in the resolved sequence.

Implicit runs cover what the author left ungrouped, for narration: a run
of consecutive same-kind elements, capped in length, with every text
element opening its own run (labels are narrated on their own).
"""

import logging
from typing import Dict, Optional, Sequence

from ..models.data_models import AnimationGroup, DrawingElement, ElementKind


logger = logging.getLogger(__name__)

RUN_ID_PREFIX = "run-"


class GroupCollector:

    def __init__(self, max_run_length: int = 3):
        self.max_run_length = max_run_length

    def collect(self, ordered: Sequence[DrawingElement]) -> Dict[str, AnimationGroup]:
        """Explicit groups keyed by primary group id, in first-encounter order."""
        groups: Dict[str, AnimationGroup] = {}

        for element in ordered:
            group_id = element.primary_group_id
            if group_id is None:
                continue
            group = groups.get(group_id)
            if group is None:
                group = AnimationGroup(group_id=group_id)
                groups[group_id] = group
            group.member_ids.append(element.id)

        if groups:
            sizes = ", ".join(f"{gid}={g.size}" for gid, g in groups.items())
            logger.debug(f"Collected {len(groups)} explicit groups: {sizes}")
        return groups

    def _starts_new_run(self, element: DrawingElement, current: Optional[AnimationGroup]) -> bool:
        if current is None:
            return True
        if element.kind != current.kind:
            return True
        if current.size >= self.max_run_length:
            return True
        if element.kind == ElementKind.TEXT:
            return True
        return False

    def collect_runs(self, ordered: Sequence[DrawingElement]) -> Dict[str, AnimationGroup]:
        """
        Implicit narrative runs over the ungrouped elements of a sequence.

        Grouped elements are skipped without breaking the current run.
        """
        runs: Dict[str, AnimationGroup] = {}
        current: Optional[AnimationGroup] = None

        for element in ordered:
            if element.group_ids:
                continue
            if self._starts_new_run(element, current):
                run_id = f"{RUN_ID_PREFIX}{len(runs)}"
                current = AnimationGroup(
                    group_id=run_id,
                    kind=element.kind,
                    implicit=True,
                )
                runs[run_id] = current
            current.member_ids.append(element.id)

        logger.debug(f"Collected {len(runs)} implicit runs")
        return runs
