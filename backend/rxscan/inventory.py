"""
Inventory Projector — 从完整处方历史推导"当前在用药品"。

每次调用都从头计算，没有缓存：today 变了结果就得变。
"""

from .models import InventoryRow, Prescription
from .supply import remaining_days


def active_inventory(history, today) -> list[InventoryRow]:
    """
    展开所有处方的所有药品 → 计算剩余天数 → 去掉已用完的 → 按剩余天数升序。

    Args:
        history: Prescription 序列（顺序无所谓，但决定了同剩余天数时的先后）
        today:   date / datetime，显式传入

    Returns:
        remaining_days > 0 的 InventoryRow 列表。sorted() 是稳定排序，
        剩余天数相同的行保持展开时的顺序。
    """
    rows = [
        InventoryRow(
            medication_id=med.id,
            prescription_id=prescription.id,
            name=med.name,
            dosage=med.dosage,
            usage=med.usage,
            remaining_days=remaining_days(prescription.prescription_date, med.days, today),
        )
        for prescription in history
        for med in prescription.medications
    ]

    active = [row for row in rows if row.remaining_days > 0]
    return sorted(active, key=lambda row: row.remaining_days)


def history_recent_first(history) -> list[Prescription]:
    """历史页的默认顺序：处方日新的在前。同一天的保持插入顺序。"""
    # "YYYY-MM-DD" 字符串的字典序就是日期序
    return sorted(history, key=lambda p: p.prescription_date, reverse=True)
