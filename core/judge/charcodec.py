"""
字符数组的编解码

原地修改字符数组一类的题目，测试数据以 ["h","e","l","l","o"] 的形式保存。
部分语言的入口程序只读取一行扁平字符串（hello），因此提交给代码执行服务前需要
把数组折叠成字符串，比较输出前再把扁平输出展开回数组字面量，两个方向必须对称。
"""
import json


def encode_char_array(values: list[str]) -> str:
    return "".join(values)


def decode_char_array(flat: str) -> list[str]:
    return list(flat)


def parse_char_array(literal: str) -> list[str] | None:
    """
    尝试把字面量解析成字符数组，单引号写法同样支持，不是字符数组时返回 None
    """
    try:
        parsed = json.loads(literal.replace("'", '"'))
    except ValueError:
        return None
    if isinstance(parsed, list) and all(isinstance(item, str) and len(item) == 1 for item in parsed):
        return parsed
    return None


def render_char_array(values: list[str]) -> str:
    return json.dumps(values, separators=(",", ":"), ensure_ascii=False)


def is_array_literal(text: str) -> bool:
    return text.startswith("[") and text.endswith("]")
