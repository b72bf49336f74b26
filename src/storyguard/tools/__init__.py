"""StoryGuard Tools Package

密度分析、曲线对比、平衡检查与字数统计。
"""

from .density_controller import DensityController
from .word_counter import count_chinese_words, word_count_deviation

__all__ = ['DensityController', 'count_chinese_words', 'word_count_deviation']
