"""
core/ratings.py – Incremental running mean cho rating / hygiene rating.

Vendor chỉ lưu (mean, count) đã làm tròn 1 chữ số thập phân; giá trị đã
làm tròn là base cho lần cập nhật sau, nên sai số làm tròn tích luỹ dần.
Đây là hành vi đã biết, không tự sửa bằng cách tính lại từ toàn bộ reviews.
"""
from decimal import ROUND_HALF_UP, Decimal

MIN_RATING = 0.0
MAX_RATING = 5.0

RatingState = tuple[float, int]


def round1(value: float) -> float:
    """Làm tròn 1 chữ số thập phân, half away from zero (4.25 → 4.3, -4.25 → -4.3)."""
    return float(Decimal(repr(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _clamp(value: float) -> float:
    return min(MAX_RATING, max(MIN_RATING, value))


def add_rating(mean: float, count: int, value: float) -> RatingState:
    """Thêm 1 rating vào (mean, count)."""
    count = max(count, 0)
    total = mean * count + value
    return _clamp(round1(total / (count + 1))), count + 1


def remove_rating(mean: float, count: int, value: float) -> RatingState:
    """Bỏ 1 rating khỏi (mean, count). Bỏ rating cuối cùng → reset (0, 0)."""
    if count <= 1:
        return 0.0, 0
    total = mean * count - value
    return _clamp(round1(total / (count - 1))), count - 1
