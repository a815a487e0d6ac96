"""
剩余天数计算。

纯函数：today 必须由调用方显式传入，这里不读系统时钟。
"""

from datetime import date, datetime, timedelta


def _as_date(value) -> date:
    # datetime 是 date 的子类，先判断 datetime，去掉时分秒（= 归一到当天零点）
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise TypeError(f"Expected date, datetime or 'YYYY-MM-DD' string, got {type(value).__name__}")


def end_date(prescription_date, supply_days: int) -> date:
    """处方日 + 天数（按日历日加）。超出日历上限时停在 date.max。"""
    if supply_days < 0:
        raise ValueError(f"supply_days must be >= 0, got {supply_days}")
    start = _as_date(prescription_date)
    return start + timedelta(days=min(supply_days, (date.max - start).days))


def remaining_days(prescription_date, supply_days: int, today) -> int:
    """
    从 today 到药用完那天还剩几天。

    Args:
        prescription_date: date / datetime / "YYYY-MM-DD"
        supply_days:       处方天数（>= 0）
        today:             date / datetime，datetime 会被归一到当天零点

    Returns:
        end_date - today 的整天数；end_date <= today 时返回 0，永不为负。
    """
    delta = end_date(prescription_date, supply_days) - _as_date(today)
    # 纯日期相减没有小数天，天花板取整自然成立
    return max(delta.days, 0)
