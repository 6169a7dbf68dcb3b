"""근무 시간대 계산 — (근무유형, 날짜) → (시작, 종료).

Shift window calculator — (shift_type, date) → (start, end).

    Morning  date 06:00 → date 14:00
    Evening  date 14:00 → date 22:00
    Night    date 22:00 → date+1 06:00

Windows are facility-local naive datetimes and are half-open: an instant
equal to the end belongs to the next window.
"""

from datetime import date, datetime, time, timedelta

from loomtrack.models.shift import SHIFT_EVENING, SHIFT_MORNING, SHIFT_NIGHT
from loomtrack.utils.exceptions import InvalidInputError

# 근무유형별 (시작 시각, 종료 시각, 종료일 오프셋) — (start, end, end day offset)
SHIFT_HOURS: dict[str, tuple[time, time, int]] = {
    SHIFT_MORNING: (time(6, 0), time(14, 0), 0),
    SHIFT_EVENING: (time(14, 0), time(22, 0), 0),
    SHIFT_NIGHT: (time(22, 0), time(6, 0), 1),
}


def compute_window(shift_type: str, scheduled_date: date) -> tuple[datetime, datetime]:
    """근무 시작/종료 시각을 계산합니다.

    Compute the [start, end) window of a shift.

    Args:
        shift_type: 근무 유형 (Morning | Evening | Night)
        scheduled_date: 근무 날짜 (Scheduled calendar date)

    Returns:
        tuple[datetime, datetime]: (시작, 종료) — start < end always holds

    Raises:
        InvalidInputError: 알 수 없는 근무 유형 (Unknown shift type)
    """
    hours = SHIFT_HOURS.get(shift_type)
    if hours is None:
        raise InvalidInputError(f"Unknown shift type: {shift_type}")
    start_at, end_at, end_offset = hours
    start: datetime = datetime.combine(scheduled_date, start_at)
    end: datetime = datetime.combine(scheduled_date + timedelta(days=end_offset), end_at)
    return start, end


def contains(start: datetime, end: datetime, instant: datetime) -> bool:
    return start <= instant < end


def format_clock(instant: datetime) -> str:
    """HH:MM 형식 (Human-readable clock time)."""
    return instant.strftime("%H:%M")


def reading_window(start: datetime, end: datetime, ended_at: datetime | None = None) -> tuple[datetime, datetime]:
    """근무의 측정값 집계 구간을 계산합니다.

    Reading window of a shift: [start, end], cut short at ended_at when the
    shift was closed early. A close after the window end does not extend it.
    Shift summaries and shift history both aggregate over this window.
    """
    last: datetime = min(ended_at, end) if ended_at is not None else end
    return min(start, last), last
