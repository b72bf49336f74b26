"""中文字数统计

用于检查生成的场景草稿是否符合规划字数：
- 汉字（CJK统一汉字）：每个算1个字
- 英文单词：连续字母序列算1个词
- 数字：连续数字序列算1个词
- 空白与标点不计
"""
import re

CJK_CHAR = re.compile(r'[\u4E00-\u9FFF]')
LATIN_WORD = re.compile(r'[a-zA-Z]+')
DIGIT_RUN = re.compile(r'\d+')


def count_chinese_words(text: str) -> int:
    """统计中文字数（汉字 + 英文单词 + 数字序列）

    Examples:
        >>> count_chinese_words("你好，世界！")
        4
        >>> count_chinese_words("Hello world 你好")
        4
        >>> count_chinese_words("第1章：开始")
        5
    """
    if not text:
        return 0
    return (
        len(CJK_CHAR.findall(text))
        + len(LATIN_WORD.findall(text))
        + len(DIGIT_RUN.findall(text))
    )


def word_count_deviation(text: str, target: int) -> float:
    """实际字数相对目标字数的偏差比例（目标非正时返回 0）"""
    if target <= 0:
        return 0.0
    return (count_chinese_words(text) - target) / target
