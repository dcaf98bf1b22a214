"""
分页参数规范化
"""

from typing import Tuple


def normalize_pagination(
    page: int,
    page_size: int,
    default_size: int,
    min_size: int,
    max_size: int,
) -> Tuple[int, int]:
    """
    规范化分页参数

    Args:
        page: 页码，小于1时按1处理
        page_size: 每页数量，非正数时使用默认值，并限制在 [min_size, max_size] 内
        default_size: 默认每页数量
        min_size: 每页数量下限
        max_size: 每页数量上限

    Returns:
        (page, page_size)
    """
    page = max(page, 1)
    if page_size <= 0:
        page_size = default_size
    page_size = min(max(page_size, min_size), max_size)

    return page, page_size
