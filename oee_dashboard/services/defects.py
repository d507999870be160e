# oee_dashboard/services/defects.py
from typing import Dict, Iterable, List, Tuple

from oee_dashboard.api.v1.schemas import DowntimeDefect, FailureDefect
from oee_dashboard.core.records import DowntimeEvent, FailureEvent


def aggregate_failures(events: Iterable[FailureEvent]) -> Tuple[List[FailureDefect], int]:
    """
    Group failure events by failure_detail_id.

    The first event seen for an id supplies station / type / details,
    `sum` is the number of events sharing that id.
    """
    groups: Dict[int, FailureDefect] = {}
    for event in events:
        defect = groups.get(event.failure_detail_id)
        if defect is None:
            groups[event.failure_detail_id] = FailureDefect(
                failure_detail_id=event.failure_detail_id,
                station_name=event.station_name,
                defect_type=event.defect_type,
                details_text=event.details_text,
                sum=1,
            )
        else:
            defect.sum += 1

    failure_defect = list(groups.values())
    failure_total = sum(defect.sum for defect in failure_defect)
    return failure_defect, failure_total


def aggregate_downtime(events: Iterable[DowntimeEvent]) -> Tuple[List[DowntimeDefect], int]:
    """
    Group downtime events by availability_loss_id, summing durations.
    """
    groups: Dict[int, DowntimeDefect] = {}
    for event in events:
        defect = groups.get(event.availability_loss_id)
        if defect is None:
            groups[event.availability_loss_id] = DowntimeDefect(
                availability_loss_id=event.availability_loss_id,
                station_id=event.station_id,
                details_text=event.details_text,
                downtime_minutes=event.duration_minutes,
            )
        else:
            defect.downtime_minutes += event.duration_minutes

    downtime_defect = list(groups.values())
    downtime_total = sum(defect.downtime_minutes for defect in downtime_defect)
    return downtime_defect, downtime_total
